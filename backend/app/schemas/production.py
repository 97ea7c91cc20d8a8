from datetime import datetime

from pydantic import BaseModel, Field


class ProductionCreate(BaseModel):
    pcb_id: int = Field(gt=0)
    quantity_produced: int = Field(gt=0)


class ShortageRead(BaseModel):
    component_id: int
    component: str | None = None
    part_number: str | None = None
    available: int
    required: int
    deficit: int


class ProductionRecorded(BaseModel):
    message: str = "Production recorded successfully"
    production_id: int
    pcb: str
    quantity_produced: int
    components_consumed: int
    procurement_triggers_opened: list[int] = Field(default_factory=list)


class ProductionEntryRead(BaseModel):
    id: int
    pcb_id: int
    pcb_name: str | None = None
    quantity_produced: int
    production_date: datetime


class ConsumptionRead(BaseModel):
    id: int
    component_id: int
    pcb_id: int
    quantity_used: int
    consumed_at: datetime

    class Config:
        from_attributes = True
