"""Soft-delete propagation from a parent row to its dependents.

``CASCADE_POLICY`` lists, per parent model, the dependent models and the
foreign key column that points back at the parent. Retiring a parent flips
``active`` on every still-active dependent with one set-based UPDATE per rule,
inside the caller's transaction.
"""

from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import update

from app.storecare.db.models import Item, Product, Store, StoreProductAssignment, User


@dataclass(frozen=True)
class CascadeRule:
    model: type
    column: object

    @property
    def name(self) -> str:
        return self.model.__tablename__


CASCADE_POLICY: dict[type, tuple[CascadeRule, ...]] = {
    Store: (
        CascadeRule(User, User.store_id),
        CascadeRule(StoreProductAssignment, StoreProductAssignment.store_id),
        CascadeRule(Item, Item.store_id),
    ),
    Product: (CascadeRule(StoreProductAssignment, StoreProductAssignment.product_id),),
}


def retire_by_rule(db, rule: CascadeRule, parent_id, *, actor_id: str, now: datetime) -> int:
    stmt = (
        update(rule.model)
        .where(rule.column == parent_id, rule.model.active.is_(True))
        .values(active=False, modified_by=actor_id, modified_date=now)
        .execution_options(synchronize_session="fetch")
    )
    return db.execute(stmt).rowcount or 0


def retire_dependents(db, parent, *, actor_id: str, now: datetime) -> dict[str, int]:
    counts = {}
    for rule in CASCADE_POLICY.get(type(parent), ()):
        counts[rule.name] = retire_by_rule(db, rule, parent.id, actor_id=actor_id, now=now)
    return counts


def assignment_rule_for(parent_model: type) -> CascadeRule:
    for rule in CASCADE_POLICY[parent_model]:
        if rule.model is StoreProductAssignment:
            return rule
    raise KeyError(parent_model)
