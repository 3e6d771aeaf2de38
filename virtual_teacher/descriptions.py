"""Reconciliation of the optional description attached to a course or lecture.

A description has its own presence lifecycle next to its parent row. On an
update the stored state and the submitted value decide the single action
to run:

    stored   submitted   action
    absent   present     insert
    present  absent      delete
    present  present     replace
    absent   absent      nothing
"""

import logging
from enum import Enum

from virtual_teacher.repositories.contracts import DescriptionStore

logger = logging.getLogger(__name__)


class DescriptionAction(str, Enum):
    INSERT = 'insert'
    DELETE = 'delete'
    REPLACE = 'replace'
    NOOP = 'noop'


def plan(exists: bool, new_text: str | None) -> DescriptionAction:
    if exists:
        if new_text is None:
            return DescriptionAction.DELETE
        return DescriptionAction.REPLACE

    if new_text is None:
        return DescriptionAction.NOOP
    return DescriptionAction.INSERT


class DescriptionReconciler:
    def reconcile(self, store: DescriptionStore, parent_id: int, new_text: str | None) -> DescriptionAction:
        action = plan(store.exists(parent_id), new_text)

        if action is DescriptionAction.INSERT:
            store.insert(parent_id, new_text)
        elif action is DescriptionAction.DELETE:
            store.delete(parent_id)
        elif action is DescriptionAction.REPLACE:
            store.replace(parent_id, new_text)

        logger.debug('Description of %s reconciled: %s', parent_id, action.value)
        return action

    def attach_on_create(self, store: DescriptionStore, parent_id: int, text: str | None) -> DescriptionAction:
        # A freshly created parent has nothing to delete or replace.
        if text is None:
            return DescriptionAction.NOOP

        store.insert(parent_id, text)
        return DescriptionAction.INSERT
