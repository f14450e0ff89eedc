"""
Shared schema base.

Request and response bodies use camelCase on the wire and snake_case in
Python.
"""

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


class MessageResponse(ApiModel):
    message: str
