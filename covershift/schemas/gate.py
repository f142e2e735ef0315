# covershift/schemas/gate.py
from typing import Literal

from sqlmodel import SQLModel

GateState = Literal["loading", "ok", "mismatch", "noauth"]


class GateRead(SQLModel):
    status: GateState
    role: str | None = None
    redirect_to: str | None = None
