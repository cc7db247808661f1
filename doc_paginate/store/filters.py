# doc_paginate/store/filters.py
"""Translate document-style filter, select, sort and populate specs to SQLAlchemy."""

import re
from collections.abc import Mapping
from typing import Any

from sqlalchemy import inspect as sa_inspect
from sqlalchemy.orm import selectinload
from sqlalchemy.orm.exc import UnmappedColumnError
from sqlalchemy.sql.elements import ClauseElement, ColumnElement

from doc_paginate.exception import StoreError

_TOKEN_SPLIT = re.compile(r"[\s,]+")

_OPERATORS = {
    "$eq": lambda column, value: column == value,
    "$ne": lambda column, value: column != value,
    "$gt": lambda column, value: column > value,
    "$gte": lambda column, value: column >= value,
    "$lt": lambda column, value: column < value,
    "$lte": lambda column, value: column <= value,
    "$in": lambda column, value: column.in_(list(value)),
    "$nin": lambda column, value: column.not_in(list(value)),
}

_ASCENDING = {1, "1", "asc", "ascending"}
_DESCENDING = {-1, "-1", "desc", "descending"}


def column_attribute(model: type, name: str):
    if name not in sa_inspect(model).column_attrs:
        raise StoreError(f"Unknown field '{name}' on {model.__name__}")
    return getattr(model, name)


def relationship_property(model: type, name: str):
    relationships = sa_inspect(model).relationships
    if name not in relationships:
        raise StoreError(f"Unknown relation '{name}' on {model.__name__}")
    return relationships[name]


def _tokens(spec: str | list | tuple) -> list[str]:
    if isinstance(spec, str):
        return [token for token in _TOKEN_SPLIT.split(spec.strip()) if token]
    return [str(token) for token in spec]


def build_criteria(model: type, filters: Any) -> list[ColumnElement]:
    if filters is None:
        return []
    if isinstance(filters, ClauseElement):
        return [filters]
    if isinstance(filters, (list, tuple)):
        for clause in filters:
            if not isinstance(clause, ClauseElement):
                raise StoreError(f"Filter entries must be SQL clauses, got {clause!r}")
        return list(filters)
    if not isinstance(filters, Mapping):
        raise StoreError(f"Unsupported filter type {type(filters).__name__}")

    criteria = []
    for name, value in filters.items():
        column = column_attribute(model, name)
        if isinstance(value, Mapping):
            for operator, operand in value.items():
                if operator not in _OPERATORS:
                    raise StoreError(f"Unsupported filter operator '{operator}'")
                criteria.append(_OPERATORS[operator](column, operand))
        elif isinstance(value, (list, tuple, set, frozenset)):
            criteria.append(column.in_(list(value)))
        elif value is None:
            criteria.append(column.is_(None))
        else:
            criteria.append(column == value)
    return criteria


def parse_select(model: type, spec: Any) -> list | None:
    """Columns to load, or None to load everything."""
    if spec is None:
        return None
    if isinstance(spec, Mapping):
        included = [name for name, flag in spec.items() if flag]
        excluded = [name for name, flag in spec.items() if not flag]
    else:
        names = _tokens(spec)
        included = [name for name in names if not name.startswith("-")]
        excluded = [name[1:] for name in names if name.startswith("-")]

    if included and excluded:
        raise StoreError("Projection cannot mix inclusion and exclusion")
    if included:
        return [column_attribute(model, name) for name in included]
    if excluded:
        for name in excluded:
            column_attribute(model, name)
        return [
            getattr(model, attr.key)
            for attr in sa_inspect(model).column_attrs
            if attr.key not in excluded
        ]
    return None


def parse_sort(model: type, spec: Any) -> list:
    if spec is None:
        return []
    if isinstance(spec, ClauseElement):
        return [spec]
    if isinstance(spec, Mapping):
        return [_ordered(model, name, direction) for name, direction in spec.items()]

    order = []
    for item in [spec] if isinstance(spec, str) else spec:
        if isinstance(item, ClauseElement):
            order.append(item)
        elif isinstance(item, (list, tuple)):
            name, direction = item
            order.append(_ordered(model, name, direction))
        else:
            for token in _tokens(str(item)):
                if token.startswith("-"):
                    order.append(_ordered(model, token[1:], -1))
                else:
                    order.append(_ordered(model, token.lstrip("+"), 1))
    return order


def _ordered(model: type, name: str, direction: Any):
    column = column_attribute(model, name)
    key = direction.lower() if isinstance(direction, str) else direction
    if key in _ASCENDING:
        return column.asc()
    if key in _DESCENDING:
        return column.desc()
    raise StoreError(f"Invalid sort direction {direction!r} for '{name}'")


def populate_path(item: Any) -> tuple[list[str], Any]:
    """Split a populate item into its relation path and related-column select."""
    if isinstance(item, str):
        return item.split("."), None
    if isinstance(item, Mapping) and "path" in item:
        return str(item["path"]).split("."), item.get("select")
    raise StoreError(f"Unsupported populate item {item!r}")


def populate_loader(model: type, item: Any):
    path, select_spec = populate_path(item)
    loader = None
    current = model
    for name in path:
        relation = relationship_property(current, name)
        attribute = getattr(current, name)
        loader = selectinload(attribute) if loader is None else loader.selectinload(attribute)
        current = relation.mapper.class_

    columns = parse_select(current, select_spec)
    if columns is not None:
        columns.extend(_join_columns(relation, related=True))
        loader = loader.load_only(*columns)
    return loader


def join_columns_for(model: type, item: Any) -> list:
    """Parent columns a populated relation needs loaded to resolve itself."""
    path, _ = populate_path(item)
    return _join_columns(relationship_property(model, path[0]), related=False)


def _join_columns(relation, related: bool) -> list:
    mapper = relation.mapper if related else relation.parent
    columns = relation.remote_side if related else relation.local_columns
    attributes = []
    for column in columns:
        try:
            prop = mapper.get_property_by_column(column)
        except UnmappedColumnError:
            continue
        attributes.append(getattr(mapper.class_, prop.key))
    return attributes


def relation_tree(items: list[Any]) -> dict[str, dict]:
    tree: dict[str, dict] = {}
    for item in items:
        node = tree
        for name in populate_path(item)[0]:
            node = node.setdefault(name, {})
    return tree


def to_plain(instance: Any, relations: dict[str, dict]) -> dict[str, Any]:
    """Loaded columns of ``instance`` plus the populated relations, as dicts."""
    state = sa_inspect(instance)
    record = {
        attr.key: state.dict[attr.key]
        for attr in state.mapper.column_attrs
        if attr.key in state.dict
    }
    for name, nested in relations.items():
        value = getattr(instance, name)
        if value is None:
            record[name] = None
        elif state.mapper.relationships[name].uselist:
            record[name] = [to_plain(child, nested) for child in value]
        else:
            record[name] = to_plain(value, nested)
    return record
