# utils/schema_tools.py
import types
from typing import Annotated, Iterable, Optional, Type, Union, get_args, get_origin

from pydantic import BaseModel, ConfigDict, Field, create_model, model_validator


def _allows_none(annotation) -> bool:
    if annotation is None:
        return True
    return get_origin(annotation) in (Union, types.UnionType) and type(None) in get_args(annotation)


def make_partial(
    model: Type[BaseModel],
    name: str,
    exclude: Iterable[str] = (),
    extra_fields: dict = None,
) -> Type[BaseModel]:
    """Build the partial-update payload for a creation payload.

    Every field may be omitted while keeping its constraints; unknown keys are
    rejected so derived columns cannot be smuggled into an update, and an
    explicit ``null`` is refused for fields the creation payload does not
    allow to be empty.
    """
    excluded = set(exclude)
    fields = {}
    not_nullable = []
    for field_name, field in model.model_fields.items():
        if field_name in excluded:
            continue
        annotation = field.annotation
        if not _allows_none(annotation):
            not_nullable.append(field_name)
        if field.metadata:
            annotation = Annotated[(annotation, *field.metadata)]
        fields[field_name] = (
            Optional[annotation],
            Field(default=None, description=field.description),
        )
    fields.update(extra_fields or {})

    def reject_nulls(cls, data):
        if isinstance(data, dict):
            nulls = [key for key in not_nullable if key in data and data[key] is None]
            if nulls:
                raise ValueError(f"{', '.join(nulls)} cannot be null")
        return data

    return create_model(
        name,
        __config__=ConfigDict(extra="forbid", use_enum_values=True),
        __module__=model.__module__,
        __validators__={"reject_nulls": model_validator(mode="before")(reject_nulls)},
        **fields,
    )
