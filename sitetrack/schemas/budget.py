from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ExpenseItem(BaseModel):
    """One expense embedded in ``Budget.expenses``; stored with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: Optional[str] = None
    category: Literal["materials", "labor", "equipment", "other"]
    amount: float = Field(ge=0)
    description: Optional[str] = None
    date: datetime
    invoice_number: Optional[str] = None
    vendor: Optional[str] = None
    payment_status: Literal["pending", "paid", "overdue"] = "pending"
    payment_date: Optional[datetime] = None
    added_by: Optional[str] = None

    def as_record(self) -> dict:
        return self.model_dump(by_alias=True)
