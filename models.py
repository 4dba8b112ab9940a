from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional, Any, Union


def _as_list(value: Any) -> Optional[List[Any]]:
    return list(value) if isinstance(value, list) else None


class AddExpenseRequest(BaseModel):
    """Body of POST /addExpense, camelCase on the wire"""

    model_config = ConfigDict(populate_by_name=True)

    date_desc: Optional[str] = Field(None, alias="dateDesc", description="Natural-language date, e.g. 'yesterday'")
    amount_eur: Any = Field(None, alias="amountEur", description="Amount in euros, number or numeric string")
    description: Optional[str] = Field(None, description="Free-text name of the expense")
    category_id: Optional[int] = Field(None, alias="categoryId")
    payer_id: Optional[Union[str, int]] = Field(None, alias="payerId", description="Splitser member id of the payer")
    cookies: Any = Field(None, description="Session cookies as a 'k=v; k2=v2' string or a mapping")
    shares_attributes: Any = Field(None, alias="sharesAttributes", description="Explicit Splitser shares, used when a list")
    split_between: Any = Field(None, alias="splitBetween", description="Exactly two member ids to split 50/50 between")

    def to_expense(self) -> "ExpenseRequest":
        return ExpenseRequest(
            date_description=self.date_desc,
            amount=self.amount_eur,
            description=self.description,
            category_id=self.category_id,
            payer_id=self.payer_id,
            shares=_as_list(self.shares_attributes),
            split_between=_as_list(self.split_between),
        )


class ExpenseRequest(BaseModel):
    date_description: Optional[str] = None
    amount: Any = None
    description: Optional[str] = None
    category_id: Optional[int] = None
    payer_id: Optional[Union[str, int]] = None
    shares: Optional[List[Any]] = None
    split_between: Optional[List[Any]] = None


class ErrorResponse(BaseModel):
    error: str
