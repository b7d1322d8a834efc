from __future__ import annotations

from sqlalchemy import asc, desc
from sqlalchemy.orm import Query, contains_eager, selectinload
from sqlalchemy.orm.attributes import InstrumentedAttribute

from catalog_admin.services.list_query import MatchExpression, QueryDescriptor


def _relationship_attr(model, relation: str) -> InstrumentedAttribute | None:
    attr = getattr(model, relation, None)
    if attr is None or not hasattr(attr, "property") or not hasattr(attr.property, "mapper"):
        return None
    return attr


def _resolve_column(model, path: str):
    if "." not in path:
        col = getattr(model, path, None)
        if col is None or not hasattr(col, "property") or not hasattr(col.property, "columns"):
            return None
        return col
    relation, column = path.split(".", 1)
    rel_attr = _relationship_attr(model, relation)
    if rel_attr is None:
        return None
    return _resolve_column(rel_attr.property.mapper.class_, column)


def _match_clause(col, expr: MatchExpression):
    if expr.kind == "eq":
        return col == expr.value
    if expr.kind == "contains":
        return col.icontains(expr.value, autoescape=True)
    raise ValueError(f"Unsupported match kind: {expr.kind}")


def apply_relations(q: Query, model, relations) -> Query:
    """Load the named relations eagerly; many-to-one relations are inner-joined."""
    for relation in sorted(relations):
        rel_attr = _relationship_attr(model, relation)
        if rel_attr is None:
            continue
        if rel_attr.property.uselist:
            q = q.options(selectinload(rel_attr))
        else:
            q = q.join(rel_attr).options(contains_eager(rel_attr))
    return q


def apply_query_descriptor(q: Query, model, descriptor: QueryDescriptor, *, sortable: tuple[str, ...] = ()) -> Query:
    relations = set(descriptor.relations)
    for path in descriptor.where:
        if "." in path:
            relations.add(path.split(".", 1)[0])
    q = apply_relations(q, model, relations)

    for path, expr in descriptor.where.items():
        col = _resolve_column(model, path)
        if col is None:
            continue
        q = q.filter(_match_clause(col, expr))

    for field_name, direction in descriptor.order.items():
        if sortable and field_name not in sortable:
            continue
        col = _resolve_column(model, field_name)
        if col is None:
            continue
        q = q.order_by(desc(col) if str(direction).lower() == "desc" else asc(col))
    # Stable paging across rows sharing the sort value.
    q = q.order_by(asc(model.id))
    return q
