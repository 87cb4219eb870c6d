from src.services.enrichment_types import EnrichedTransaction, TransactionSummary


def summarize_transactions(transactions: list[EnrichedTransaction]) -> TransactionSummary:
    """Totals over an enriched list; unresolved USD amounts count as zero."""
    total_income = 0.0
    verified_income = 0.0
    verified = 0
    labeled = 0
    for tx in transactions:
        usd = tx.amount_usd or 0.0
        total_income += usd
        if tx.verified_sender is not None:
            verified += 1
            verified_income += usd
        if tx.user_label:
            labeled += 1

    return TransactionSummary(
        total_transactions=len(transactions),
        verified_transactions=verified,
        labeled_transactions=labeled,
        total_income=total_income,
        verified_income=verified_income,
    )
