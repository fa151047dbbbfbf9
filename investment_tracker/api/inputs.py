"""
Procedure input decoding.

Mutations take their input as the JSON request body, which FastAPI validates
directly against the input model.  Queries are plain ``GET`` requests and
carry their input as a JSON document in the ``input`` query parameter, e.g.
``GET /rpc/getInvestmentById?input={"id":1}``.  ``query_input`` builds the
dependency that decodes and validates that document with the same pydantic
model, so both kinds of procedure fail the same way on bad input.
"""

from typing import Callable, Type, TypeVar

from fastapi import Query
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, ValidationError

InputModel = TypeVar("InputModel", bound=BaseModel)


def query_input(model: Type[InputModel]) -> Callable[[str], InputModel]:
    """Return a dependency parsing ``?input=<json>`` into ``model``."""

    def _decode(
        input: str = Query(..., description=f"JSON-encoded {model.__name__} document"),
    ) -> InputModel:
        try:
            return model.model_validate_json(input)
        except ValidationError as exc:
            raise RequestValidationError(exc.errors(include_url=False)) from exc

    return _decode
