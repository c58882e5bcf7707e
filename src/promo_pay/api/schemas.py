from pydantic import BaseModel
from typing import List, Optional


class PaymentTypeSchema(BaseModel):
    name: str


class PaymentOptionSchema(BaseModel):
    name: str
    normalized_search_key: str


class SelectorStateSchema(BaseModel):
    loading_phase: str
    search_text: str
    all_options: List[PaymentOptionSchema]
    displayed_options: List[PaymentOptionSchema]
    selected: Optional[PaymentOptionSchema] = None
    affirmative_label: str


class CountdownStateSchema(BaseModel):
    remaining_seconds: int
    screen_phase: str
    is_selector_open: bool
    selected_option: Optional[PaymentOptionSchema] = None
    can_finish: bool
    message: str
    selector: Optional[SelectorStateSchema] = None


class OpenSelectorRequestSchema(BaseModel):
    open: bool = True


class SearchRequestSchema(BaseModel):
    text: str = ""


class ToggleRequestSchema(BaseModel):
    name: str


class DismissRequestSchema(BaseModel):
    confirm: bool = True


class ErrorResponseSchema(BaseModel):
    detail: str
