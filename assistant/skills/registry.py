"""
Skill Registry - Intent name to handler descriptor mapping.

The registry is populated once at startup from skill bundles and then
frozen. After freezing it is read-only and safe to share across
concurrent turns without locking.

Plugin contract:
================
A Skill bundle has a non-empty name and description, and one
HandlerDescriptor per intent. Each descriptor needs a callable handler,
a numeric base confidence in [0, 1] and a boolean requires_confirmation.
Violations raise InvalidSkillError; a repeated intent name raises
DuplicateIntentError. Both abort startup.

Usage:
======
```python
registry = SkillRegistry()
registry.register_skill(browser_skill)
registry.freeze()

descriptor = registry.lookup("open_website")
intent = registry.route_for_slot("ask_website_name")  # "open_website"
```
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from assistant.core.errors import DuplicateIntentError, InvalidSkillError, RegistryFrozenError


logger = logging.getLogger("assistant.skills.registry")


# Handler signature: (entities, context) -> Outcome | str | dict, sync or async
Handler = Callable[[Dict[str, Any], Any], Any]


# ---------------------------------------------------------------------------
# DESCRIPTORS
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class HandlerDescriptor:
    """
    Everything the Dispatcher needs to run one intent.

    Attributes:
        intent: Unique intent name (e.g. "toggle_wifi")
        base_confidence: Advisory score declared by the skill; reported,
            not used for gating
        requires_confirmation: Ask the user before executing
        execute: Handler callable (entities, context)
        description: Action text for the confirmation prompt
            (e.g. "shut down the computer")
        plugin: Name of the owning skill
    """
    intent: str
    base_confidence: float
    requires_confirmation: bool
    execute: Handler
    description: Optional[str] = None
    plugin: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "intent": self.intent,
            "base_confidence": self.base_confidence,
            "requires_confirmation": self.requires_confirmation,
            "description": self.description,
            "plugin": self.plugin,
        }


@dataclass
class Skill:
    """
    A bundle of related intents shipped together.

    Attributes:
        name: Skill name (e.g. "browser")
        description: What the skill covers
        intents: Descriptors, one per intent
        awaiting_routes: slot_name -> intent that consumes the slot when the
            awaiting state carries no originating intent
    """
    name: str
    description: str
    intents: List[HandlerDescriptor] = field(default_factory=list)
    awaiting_routes: Dict[str, str] = field(default_factory=dict)


# ---------------------------------------------------------------------------
# REGISTRY
# ---------------------------------------------------------------------------

class SkillRegistry:
    """
    Registry of every intent the assistant can execute.

    Not a singleton: the host builds one at startup and hands it to the
    Dispatcher.
    """

    def __init__(self):
        self._descriptors: Dict[str, HandlerDescriptor] = {}
        self._skills: Dict[str, Skill] = {}
        self._awaiting_routes: Dict[str, str] = {}
        self._frozen = False

    # -----------------------------------------------------------------------
    # REGISTRATION
    # -----------------------------------------------------------------------

    def _check_not_frozen(self) -> None:
        if self._frozen:
            raise RegistryFrozenError("Skill registry is frozen; register skills before dispatching")

    def register(self, descriptor: HandlerDescriptor) -> None:
        """
        Register a single handler descriptor.

        Raises:
            DuplicateIntentError: If the intent name is already registered
            RegistryFrozenError: If called after freeze()
        """
        self._check_not_frozen()

        existing = self._descriptors.get(descriptor.intent)
        if existing is not None:
            raise DuplicateIntentError(descriptor.intent, existing.plugin)

        self._descriptors[descriptor.intent] = descriptor
        logger.debug(f"Registered intent: {descriptor.intent} (plugin={descriptor.plugin})")

    def register_skill(self, skill: Skill) -> None:
        """
        Validate a skill bundle and register all of its intents.

        Validation runs over the whole bundle before anything is registered,
        so a rejected skill leaves no partial registrations behind.

        Raises:
            InvalidSkillError: Contract violation
            DuplicateIntentError: Intent already owned by another skill
            RegistryFrozenError: If called after freeze()
        """
        self._check_not_frozen()
        self._validate_skill(skill)

        seen = set()
        for descriptor in skill.intents:
            if descriptor.intent in seen:
                raise DuplicateIntentError(descriptor.intent, skill.name)
            seen.add(descriptor.intent)
            if descriptor.intent in self._descriptors:
                raise DuplicateIntentError(descriptor.intent, self._descriptors[descriptor.intent].plugin)

        for descriptor in skill.intents:
            if descriptor.plugin != skill.name:
                descriptor = HandlerDescriptor(
                    intent=descriptor.intent,
                    base_confidence=descriptor.base_confidence,
                    requires_confirmation=descriptor.requires_confirmation,
                    execute=descriptor.execute,
                    description=descriptor.description,
                    plugin=skill.name,
                )
            self.register(descriptor)

        for slot_name, intent in skill.awaiting_routes.items():
            self.register_awaiting_route(slot_name, intent)

        self._skills[skill.name] = skill
        logger.info(f"Loaded skill: {skill.name} ({len(skill.intents)} intents)")

    def _validate_skill(self, skill: Skill) -> None:
        if not isinstance(skill.name, str) or not skill.name.strip():
            raise InvalidSkillError("Skill must have 'name' as a non-empty string")

        if not isinstance(skill.description, str) or not skill.description.strip():
            raise InvalidSkillError(f"Skill '{skill.name}' must have 'description' as a non-empty string")

        if skill.name in self._skills:
            raise InvalidSkillError(f"Skill '{skill.name}' is already registered")

        for descriptor in skill.intents:
            if not isinstance(descriptor, HandlerDescriptor):
                raise InvalidSkillError(f"Skill '{skill.name}' has an intent that is not a HandlerDescriptor")

            name = descriptor.intent
            if not isinstance(name, str) or not name:
                raise InvalidSkillError(f"Skill '{skill.name}' has an intent with an empty name")

            if not callable(descriptor.execute):
                raise InvalidSkillError(f"Intent '{name}' must have a callable handler")

            # bool is an int subclass; reject it explicitly
            confidence = descriptor.base_confidence
            if isinstance(confidence, bool) or not isinstance(confidence, (int, float)):
                raise InvalidSkillError(f"Intent '{name}' must specify 'base_confidence' as a number")
            if not 0.0 <= confidence <= 1.0:
                raise InvalidSkillError(f"Intent '{name}' base_confidence must be between 0 and 1")

            if not isinstance(descriptor.requires_confirmation, bool):
                raise InvalidSkillError(f"Intent '{name}' must specify 'requires_confirmation' as a boolean")

    def register_awaiting_route(self, slot_name: str, intent: str) -> None:
        """
        Route an awaiting slot with no originating intent to a consumer.

        Raises:
            InvalidSkillError: If the slot is already routed elsewhere
            RegistryFrozenError: If called after freeze()
        """
        self._check_not_frozen()
        current = self._awaiting_routes.get(slot_name)
        if current is not None and current != intent:
            raise InvalidSkillError(
                f"Awaiting slot '{slot_name}' already routed to '{current}', cannot route to '{intent}'"
            )
        self._awaiting_routes[slot_name] = intent

    def freeze(self) -> None:
        """Make the registry read-only. Idempotent."""
        if not self._frozen:
            self._frozen = True
            logger.info(
                f"Skill registry frozen: {len(self._skills)} skills, {len(self._descriptors)} intents"
            )

    @property
    def frozen(self) -> bool:
        return self._frozen

    # -----------------------------------------------------------------------
    # LOOKUP
    # -----------------------------------------------------------------------

    def lookup(self, intent: str) -> Optional[HandlerDescriptor]:
        """Descriptor for an intent, or None."""
        return self._descriptors.get(intent)

    def has_intent(self, intent: str) -> bool:
        return intent in self._descriptors

    def route_for_slot(self, slot_name: str) -> Optional[str]:
        """Intent that consumes an awaiting slot, or None."""
        return self._awaiting_routes.get(slot_name)

    def list_intents(self) -> List[str]:
        return sorted(self._descriptors)

    def list_skills(self) -> List[Dict[str, Any]]:
        """Skills with their intents, for the HTTP surface."""
        return [
            {
                "name": skill.name,
                "description": skill.description,
                "intents": [self._descriptors[d.intent].to_dict() for d in skill.intents],
            }
            for skill in self._skills.values()
        ]

    def get_metadata(self, intent: str) -> Optional[Dict[str, Any]]:
        descriptor = self.lookup(intent)
        return descriptor.to_dict() if descriptor else None

    def stats(self) -> Dict[str, Any]:
        return {
            "skills": len(self._skills),
            "intents": len(self._descriptors),
            "awaiting_routes": dict(self._awaiting_routes),
            "confirmation_required": sorted(
                d.intent for d in self._descriptors.values() if d.requires_confirmation
            ),
            "frozen": self._frozen,
        }
