"""
Salon API — Document Model Base
================================

What:  Shared Pydantic base for documents stored in MongoDB.
Why:   Stored documents and API responses use the same camelCase keys, while
       Python code uses snake_case attributes. One alias generator covers both.
How:   `from_document()` turns a raw MongoDB document (with `_id`) into a
       model with a string `id`; `to_document()` produces the dict to store.
"""

from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class MongoModel(BaseModel):
    """
    Base class for stored documents.

    `id` is the string form of the document's ObjectId; it is never written
    back to the store (MongoDB owns `_id`).
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: Optional[str] = None

    @classmethod
    def from_document(cls, document: Mapping[str, Any]):
        data = dict(document)
        if "_id" in data:
            data["id"] = str(data.pop("_id"))
        return cls.model_validate(data)

    def to_document(self) -> Dict[str, Any]:
        # None values are left out, matching a field that was never set
        return self.model_dump(by_alias=True, exclude={"id"}, exclude_none=True)
