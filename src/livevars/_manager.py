"""Scope-aware storage of variables and the references that read them."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from ._errors import ReferenceIntegrityError
from ._parser import is_variable_expression
from ._reference import VariableReference
from ._value import VariableDictionary, VariableValue

if TYPE_CHECKING:
    from collections.abc import Generator

    from ._evaluator import EvaluationResult
    from ._interfaces import ChangeNotifier, DestructionSignal, Location, Scope, ScopeHierarchy, Subscription

logger = logging.getLogger(__name__)


class VariableManager:
    """Reads, writes and tracks variables across a tree of scopes.

    Variables are assigned per scope and looked up through the scope's ancestors,
    nearest first. Expressions registered at a location are resolved immediately
    and re-resolved whenever a variable they read changes. Every re-resolve
    writes the location and publishes a change for the location's scope.

    Example:
        >>> manager = VariableManager(tree, events, tree)
        >>> manager.register_reference(location, "Hello ${user}")
        >>> manager.set("user", "Ada", tree_root)
        >>> location.read()
        'Hello Ada'

    """

    def __init__(
        self,
        hierarchy: ScopeHierarchy,
        change_notifier: ChangeNotifier,
        destruction_signal: DestructionSignal,
    ) -> None:
        self._hierarchy = hierarchy
        self._change_notifier = change_notifier
        self._destruction_signal = destruction_signal
        self._variable_dictionaries: dict[Scope, VariableDictionary] = {}
        self._variable_references: dict[Scope, dict[str, VariableReference[Any]]] = {}
        self._scope_cleanup_subscriptions: dict[Scope, Subscription] = {}

    def set(self, key: str, value: Any, scope: Scope) -> None:
        """Assign ``value`` to ``key`` in ``scope``.

        If ``key`` is new to ``scope`` but assigned in an ancestor, references
        owned by ``scope`` or its descendants move over to the new assignment.
        All references reading the assignment are then re-resolved, in the order
        they subscribed.
        """
        variable_dictionary = self._get_or_create_variable_dictionary(scope)

        variable_value = variable_dictionary.get(key)
        if variable_value is None:
            variable_value = VariableValue(key=key, current_value=value)
            self._shadow_existing_references_if_needed(scope, variable_value)
            variable_dictionary[key] = variable_value
        else:
            variable_value.current_value = value

        self._update_all_references(variable_value)

    def get(self, key: str, scope: Scope) -> Any:
        """Return the value of ``key`` as seen from ``scope``.

        Scopes are searched upwards from ``scope``. Returns None, and logs a
        warning, if no scope in the chain assigns ``key``.
        """
        variable_value = self._get_variable_value(key, scope)
        if variable_value is None:
            logger.warning("Attempting to lookup unassigned variable: %s", key)
            return None

        return variable_value.current_value

    def has(self, key: str, scope: Scope) -> bool:
        """Check if ``key`` is visible from ``scope`` and holds a value other than None."""
        variable_value = self._get_variable_value(key, scope)

        return variable_value is not None and variable_value.current_value is not None

    def register_reference(self, location: Location[Any], variable_expression: str) -> Any:
        """Begin tracking ``variable_expression`` at ``location``.

        The location is written right away and again whenever a variable the
        expression reads changes. Tracking stops on ``deregister_reference`` or
        when the location's scope is destroyed.

        If the location is already tracked, an error is logged and the existing
        registration is kept untouched.

        If the first write to ``location`` raises, the registration is discarded
        and the exception propagates.

        Returns:
            The resolved value, or None if it could not be resolved.

        """
        reference_map = self._get_or_create_reference_map(location.owning_scope)
        location_key = location.stable_key()

        existing_reference = reference_map.get(location_key)
        if existing_reference is not None:
            logger.error("Attempting to register reference which has already been declared at %s", location_key)
            return existing_reference.location.read()

        reference: VariableReference[Any] = VariableReference(variable_expression, location)
        reference_map[location_key] = reference
        reference.cleanup_subscription = self._destruction_signal.on_before_destroy(
            location.owning_scope,
            lambda: self._deregister_on_destroy(reference),
        )

        try:
            return self._update_reference(reference).value
        except Exception:
            logger.debug("First resolve of %r failed, discarding the registration", reference)
            self.deregister_reference(location)
            raise

    def is_variable_reference(self, location: Location[Any]) -> bool:
        """Check if the value at ``location`` is currently tracked as a variable reference."""
        return self._get_reference_at_location(location) is not None

    @staticmethod
    def is_variable_expression(potential_expression: str) -> bool:
        """Check if the provided string should be treated as a variable expression."""
        return is_variable_expression(potential_expression)

    def deregister_reference(self, location: Location[Any]) -> str:
        """End tracking at ``location`` and return the original variable expression.

        The value at ``location`` is left as is.

        Raises:
            ReferenceIntegrityError: If ``location`` is not tracked.

        """
        reference = self._get_reference_at_location(location)
        if reference is None:
            msg = (
                f"Attempted to deregister reference at {location.stable_key()} "
                "which does not contain a registered reference"
            )
            logger.error(msg)
            raise ReferenceIntegrityError(msg)

        del self._variable_references[location.owning_scope][location.stable_key()]
        reference.dispose()

        result = reference.unresolve()
        self._update_value_reference_tracking(reference, result)

        return reference.expression

    def get_variable_expression_from_location(self, location: Location[Any]) -> str:
        """Return the original variable expression at ``location``, which stays tracked.

        Raises:
            ReferenceIntegrityError: If ``location`` is not tracked.

        """
        reference = self._get_reference_at_location(location)
        if reference is None:
            msg = (
                f"Attempted to resolve reference at {location.stable_key()} "
                "which does not contain a registered reference"
            )
            logger.error(msg)
            raise ReferenceIntegrityError(msg)

        return reference.expression

    def _deregister_on_destroy(self, reference: VariableReference[Any]) -> None:
        # The scope may be destroyed after an explicit deregistration, or after the
        # location was re-registered with a new reference
        if self._get_reference_at_location(reference.location) is reference:
            logger.debug("Scope destroyed, deregistering %r", reference)
            self.deregister_reference(reference.location)

    def _iter_scope_chain(self, scope: Scope) -> Generator[Scope]:
        """Yield ``scope`` followed by its ancestors, nearest first."""
        current: Scope | None = scope
        while current is not None:
            yield current
            current = self._hierarchy.get_parent(current)

    def _update_all_references(self, variable_value: VariableValue[Any]) -> None:
        # Resolving only changes the resolving reference's own subscriptions,
        # but it may drop out of this set, so iterate over a snapshot
        for reference in list(variable_value.references):
            self._update_reference(reference)

    def _update_reference(self, reference: VariableReference[Any]) -> EvaluationResult[Any]:
        scope = reference.owning_scope
        result = reference.evaluate(self._get_resolve_dictionary(scope))
        # Track dependencies before writing, a rejected write must not leave them out of sync
        self._update_value_reference_tracking(reference, result)
        reference.location.write(result.value)
        logger.debug("Resolved %r in scope %r", reference, scope)
        self._change_notifier.publish_change(scope)

        return result

    def _get_reference_at_location(self, location: Location[Any]) -> VariableReference[Any] | None:
        reference_map = self._variable_references.get(location.owning_scope)
        if reference_map is None:
            return None

        return reference_map.get(location.stable_key())

    def _get_or_create_reference_map(self, scope: Scope) -> dict[str, VariableReference[Any]]:
        self._forget_scope_on_destroy(scope)
        return self._variable_references.setdefault(scope, {})

    def _get_or_create_variable_dictionary(self, scope: Scope) -> VariableDictionary:
        self._forget_scope_on_destroy(scope)
        return self._variable_dictionaries.setdefault(scope, {})

    def _forget_scope_on_destroy(self, scope: Scope) -> None:
        if scope not in self._scope_cleanup_subscriptions:
            self._scope_cleanup_subscriptions[scope] = self._destruction_signal.on_before_destroy(
                scope,
                lambda: self._forget_scope(scope),
            )

    def _forget_scope(self, scope: Scope) -> None:
        """Drop everything stored for a destroyed ``scope``."""
        # References of this scope may not have been cleaned up yet, depending on callback order
        for reference in list(self._variable_references.get(scope, {}).values()):
            self.deregister_reference(reference.location)

        logger.debug("Scope %r destroyed, dropping its variables", scope)
        self._variable_dictionaries.pop(scope, None)
        self._variable_references.pop(scope, None)
        del self._scope_cleanup_subscriptions[scope]

    def _get_dictionary_containing_key(self, key: str, scope: Scope) -> VariableDictionary | None:
        for current in self._iter_scope_chain(scope):
            variable_dictionary = self._variable_dictionaries.get(current)
            if variable_dictionary is not None and key in variable_dictionary:
                return variable_dictionary

        return None

    def _get_variable_value(self, key: str, scope: Scope) -> VariableValue[Any] | None:
        variable_dictionary = self._get_dictionary_containing_key(key, scope)

        return variable_dictionary[key] if variable_dictionary is not None else None

    def _get_resolve_dictionary(self, scope: Scope) -> dict[str, Any]:
        """Flatten the variables visible from ``scope``, nearer scopes taking precedence."""
        resolve_dictionary: dict[str, Any] = {}
        for current in reversed(list(self._iter_scope_chain(scope))):
            variable_dictionary = self._variable_dictionaries.get(current, {})
            resolve_dictionary.update((key, value.current_value) for key, value in variable_dictionary.items())

        return resolve_dictionary

    def _update_value_reference_tracking(
        self,
        reference: VariableReference[Any],
        evaluation_result: EvaluationResult[Any],
    ) -> None:
        scope = reference.owning_scope

        for name in evaluation_result.variable_names_removed:
            # Every name read before has at least a placeholder
            variable_value = self._get_variable_value(name, scope)
            if variable_value is None or reference not in variable_value.references:
                msg = f"Reference {reference!r} is not tracked by variable '{name}'"
                logger.error(msg)
                raise ReferenceIntegrityError(msg)
            variable_value.remove_reference(reference)

        for name in evaluation_result.variable_names_added:
            variable_value = self._get_variable_value(name, scope)
            if variable_value is None:
                variable_value = self._add_placeholder_variable(name, scope)
            variable_value.add_reference(reference)

    def _shadow_existing_references_if_needed(self, scope: Scope, new_variable_value: VariableValue[Any]) -> None:
        """Move references inside ``scope`` from an ancestor's assignment to ``new_variable_value``."""
        parent_scope = self._hierarchy.get_parent(scope)
        if parent_scope is None:
            return
        shadowed_value = self._get_variable_value(new_variable_value.key, parent_scope)
        if shadowed_value is None:
            return  # This variable is not shadowing any other

        references_to_move = [
            reference
            for reference in shadowed_value.references
            if reference.owning_scope == scope or self._hierarchy.is_descendant(reference.owning_scope, scope)
        ]
        for reference in references_to_move:
            shadowed_value.remove_reference(reference)
            new_variable_value.add_reference(reference)

        if references_to_move:
            logger.debug(
                "Variable '%s' shadowed, moved %d reference(s) to the nearer scope",
                new_variable_value.key,
                len(references_to_move),
            )

    def _add_placeholder_variable(self, name: str, scope: Scope) -> VariableValue[Any]:
        # Always at the root, so a later assignment anywhere finds something to shadow
        root_scope = self._hierarchy.get_root(scope)
        logger.debug("Adding placeholder for variable '%s'", name)
        placeholder = VariableValue(key=name, current_value=None)
        self._get_or_create_variable_dictionary(root_scope)[name] = placeholder

        return placeholder
