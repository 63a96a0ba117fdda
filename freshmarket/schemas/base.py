from datetime import datetime
from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, StringConstraints
from pydantic.alias_generators import to_camel

NonEmptyStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class BaseSchema(BaseModel):
    # camelCase on the wire, snake_case in Python
    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)


class TimestampSchema(BaseSchema):
    created_at: datetime
    updated_at: datetime
    deleted_at: Optional[datetime] = None
