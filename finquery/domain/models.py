"""Domain models - immutable financial records as delivered by the data source"""

import math
from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, List, Literal, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


def ensure_utc(value: datetime) -> datetime:
    """Treat naive timestamps as UTC so every comparison is between aware instants"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


UtcDatetime = Annotated[datetime, AfterValidator(ensure_utc)]

INDEX_SECTOR = "Index"


def _close(actual: float, expected: float, rel_tol: float = 1e-3) -> bool:
    return math.isclose(actual, expected, rel_tol=rel_tol, abs_tol=0.01)


class FlowDirection(str, Enum):
    INFLOW = "inflow"
    OUTFLOW = "outflow"


class TransactionKind(str, Enum):
    BUY = "Buy"
    SELL = "Sell"
    DEPOSIT = "Deposit"
    WITHDRAWAL = "Withdrawal"

    @property
    def direction(self) -> FlowDirection:
        if self in (TransactionKind.DEPOSIT, TransactionKind.SELL):
            return FlowDirection.INFLOW
        return FlowDirection.OUTFLOW


class TransactionStatus(str, Enum):
    COMPLETED = "Completed"
    PENDING = "Pending"
    CANCELLED = "Cancelled"
    FAILED = "Failed"
    EXPIRED = "Expired"
    REVIEWED = "Reviewed"


class AssetCategory(str, Enum):
    STOCK = "Stock"
    BOND = "Bond"
    ETF = "ETF"
    MUTUAL_FUND = "Mutual Fund"
    CASH = "Cash"
    CRYPTO = "Crypto"


class LeadStatus(str, Enum):
    NEW = "New"
    CONTACTED = "Contacted"
    QUALIFIED = "Qualified"
    PROPOSAL = "Proposal Sent"
    NEGOTIATION = "Negotiation"
    CLOSED_WON = "Closed - Won"
    CLOSED_LOST = "Closed - Lost"

    @property
    def is_terminal(self) -> bool:
        return self in (LeadStatus.CLOSED_WON, LeadStatus.CLOSED_LOST)

    @property
    def is_qualified(self) -> bool:
        """Qualified or further along the funnel, but not yet closed"""
        return self in (LeadStatus.QUALIFIED, LeadStatus.PROPOSAL, LeadStatus.NEGOTIATION)


class LeadSource(str, Enum):
    WEBSITE = "Website"
    REFERRAL = "Referral"
    SOCIAL_MEDIA = "Social Media"
    EMAIL = "Email Marketing"
    WHATSAPP = "WhatsApp"
    COLD_CALL = "Cold Call"


class Record(BaseModel):
    """Base for records parsed from camelCase JSON; frozen once fetched"""

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
        extra="ignore",
        allow_inf_nan=False,
    )


class Transaction(Record):
    """Account or trade movement; `total` is a magnitude, direction comes from `kind`"""

    id: str
    kind: TransactionKind = Field(alias="type")
    symbol: Optional[str] = None
    company: Optional[str] = None
    quantity: float = 0
    price: Optional[float] = None
    total: float = Field(ge=0)
    date: UtcDatetime
    status: TransactionStatus
    fees: float = 0

    @property
    def direction(self) -> FlowDirection:
        return self.kind.direction


class Performance(Record):
    """Percent changes over trailing windows"""

    day: float = 0
    week: float = 0
    month: float = 0
    year: float = 0


class Asset(Record):
    """Portfolio holding"""

    id: str
    symbol: str
    name: str
    category: AssetCategory
    quantity: float
    current_price: float
    total_value: float
    cost_basis: float
    unrealized_gain: float
    unrealized_gain_percent: float
    allocation: float
    performance: Performance = Field(default_factory=Performance)

    @model_validator(mode="after")
    def _check_derived_values(self) -> "Asset":
        if not _close(self.total_value, self.quantity * self.current_price):
            raise ValueError("totalValue must equal quantity * currentPrice")
        if not _close(self.unrealized_gain, self.total_value - self.cost_basis):
            raise ValueError("unrealizedGain must equal totalValue - costBasis")
        if self.cost_basis == 0 and not _close(self.unrealized_gain_percent, 0.0):
            raise ValueError("unrealizedGainPercent must be 0 when costBasis is 0")
        return self


class Interaction(Record):
    """Single entry in a lead's contact log"""

    date: UtcDatetime
    type: Literal["Call", "Email", "Meeting", "Note"]
    summary: str


class Lead(Record):
    """Sales prospect"""

    id: str
    company: str
    contact_name: str
    contact_email: str
    contact_phone: Optional[str] = None
    source: LeadSource
    status: LeadStatus
    potential_value: float
    assigned_to: Optional[str] = None
    created_date: UtcDatetime
    last_contacted_date: UtcDatetime
    scheme: Optional[str] = None
    interaction_history: List[Interaction] = Field(default_factory=list)


class PricePoint(Record):
    """Daily close in an instrument's history"""

    date: UtcDatetime
    close: float


class MarketInstrument(Record):
    """Index or tradable instrument quote"""

    symbol: str
    name: str
    value: float
    change: float
    change_percent: float
    timestamp: UtcDatetime
    high_52_week: float = Field(alias="high52Week")
    low_52_week: float = Field(alias="low52Week")
    market_cap: float = 0
    volume: float = 0
    sector: Optional[str] = None
    historical_data: List[PricePoint] = Field(default_factory=list)

    @property
    def is_index(self) -> bool:
        return self.sector == INDEX_SECTOR

    @model_validator(mode="after")
    def _check_change_percent(self) -> "MarketInstrument":
        previous = self.value - self.change
        if previous != 0:
            expected = self.change / previous * 100
            if not _close(self.change_percent, expected, rel_tol=1e-2):
                raise ValueError("changePercent must equal change / (value - change) * 100")
        return self
