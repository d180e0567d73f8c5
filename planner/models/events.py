from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

from planner import availability as codec


class _WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Event(_WireModel):
    id: int
    title: str
    description: str | None = None
    planner_id: int
    date_range: str
    invite_code: str


class Participant(_WireModel):
    id: int
    user_id: int
    event_id: int
    availability: str


class CreateEventRequest(_WireModel):
    title: str
    description: str | None = None
    date_range: str

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        v = v.strip()
        if not v or len(v) > 200:
            raise ValueError("title must be 1-200 characters")
        return v

    @field_validator("date_range")
    @classmethod
    def validate_date_range(cls, v: str) -> str:
        if codec.decode_date_range(v) is None:
            raise ValueError('dateRange must be {"start": <ISO instant>, "end": <ISO instant>} with start <= end')
        return v


class AvailabilityRequest(_WireModel):
    availability: str

    @field_validator("availability")
    @classmethod
    def validate_availability(cls, v: str) -> str:
        if not codec.is_valid(v):
            raise ValueError("availability must be a JSON array of ISO-8601 date strings")
        return v
