"""Request bodies accepted at the HTTP boundary."""

from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, Field


class BatchCreateInput(BaseModel):
    """New batch as posted by clients; accepts the short wire names (mfg, exp, line).

    Values stay loose here: the lifecycle engine owns validation so every
    violated rule is reported the same way whichever surface it came from.
    """

    name: Optional[str] = None
    manufacturing_date: Any = Field(None, validation_alias=AliasChoices("manufacturing_date", "mfg"))
    expiry_date: Any = Field(None, validation_alias=AliasChoices("expiry_date", "exp"))
    quantity: Any = None
    location: Optional[str] = None
    production_line: Optional[str] = Field(None, validation_alias=AliasChoices("production_line", "line"))

    model_config = {"extra": "ignore"}


class RecallInput(BaseModel):
    """Bulk recall request body."""

    drug_name: str = Field(..., validation_alias=AliasChoices("drugName", "drug_name"))

    model_config = {"extra": "ignore"}
