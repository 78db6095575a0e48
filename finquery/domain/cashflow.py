"""Cash flow over settled transactions"""

from dataclasses import dataclass
from typing import Iterable

from finquery.domain.models import FlowDirection, Transaction, TransactionStatus
from finquery.domain.ratios import finite_or_zero, finite_sum


@dataclass(frozen=True)
class CashFlow:
    inflow: float
    outflow: float
    inflow_count: int
    outflow_count: int
    net_flow: float


def summarize_cash_flow(transactions: Iterable[Transaction]) -> CashFlow:
    """
    Sum completed transactions by direction.

    Pending, failed and other unsettled transactions are ignored. Totals use
    an exactly rounded sum, so any ordering of the same transactions gives
    the same figures.
    """
    inflows = []
    outflows = []

    for txn in transactions:
        if txn.status is not TransactionStatus.COMPLETED:
            continue
        if txn.direction is FlowDirection.INFLOW:
            inflows.append(txn.total)
        else:
            outflows.append(txn.total)

    inflow = finite_sum(inflows)
    outflow = finite_sum(outflows)

    return CashFlow(
        inflow=inflow,
        outflow=outflow,
        inflow_count=len(inflows),
        outflow_count=len(outflows),
        net_flow=finite_or_zero(inflow - outflow),
    )
