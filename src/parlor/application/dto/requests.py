from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from parlor.domain.session.entities import PaymentMethod
from parlor.domain.table.entities import TableStatus


def _to_camel(value: str) -> str:
    parts = value.split("_")
    return parts[0] + "".join(part.capitalize() for part in parts[1:])


class CamelBaseModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=_to_camel,
        populate_by_name=True,
    )


class StartSessionRequest(CamelBaseModel):
    is_friendly: bool = False
    discount_percent: int = Field(default=0, ge=0, le=100)
    payment_method: PaymentMethod = PaymentMethod.CASH
    customer_name: str | None = Field(default=None, max_length=120)
    customer_phone: str | None = Field(default=None, max_length=32)
    notes: str | None = Field(default=None, max_length=1000)
    light: bool = True


class StopSessionRequest(CamelBaseModel):
    payment_method: PaymentMethod | None = None
    discount_percent: int | None = Field(default=None, ge=0, le=100)


class TableStatusRequest(CamelBaseModel):
    status: TableStatus


class SessionPatchRequest(CamelBaseModel):
    model_config = ConfigDict(
        alias_generator=_to_camel,
        populate_by_name=True,
        extra="forbid",
    )

    customer_name: str | None = Field(default=None, max_length=120)
    customer_phone: str | None = Field(default=None, max_length=32)
    notes: str | None = Field(default=None, max_length=1000)
    payment_method: PaymentMethod | None = None
    discount_percent: int | None = Field(default=None, ge=0, le=100)
    is_friendly: bool | None = None

    def changes(self) -> dict[str, object]:
        changes = self.model_dump(exclude_unset=True)
        for name in ("payment_method", "discount_percent", "is_friendly"):
            if name in changes and changes[name] is None:
                del changes[name]
        return changes
