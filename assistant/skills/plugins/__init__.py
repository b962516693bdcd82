"""
Built-in Skills.

Each module exposes a `skill` bundle. The host registers them in order
at startup and then freezes the registry.

Usage:
    registry = SkillRegistry()
    load_builtin_skills(registry)
    registry.freeze()
"""

import logging
from typing import List

from assistant.skills.plugins import browser, connectivity, general, media, system
from assistant.skills.registry import Skill, SkillRegistry


logger = logging.getLogger("assistant.skills.plugins")


BUILTIN_SKILLS: List[Skill] = [
    browser.skill,
    connectivity.skill,
    system.skill,
    media.skill,
    general.skill,
]


def load_builtin_skills(registry: SkillRegistry) -> SkillRegistry:
    """
    Register every built-in skill.

    Registration errors propagate; a broken skill aborts startup.
    """
    for skill in BUILTIN_SKILLS:
        registry.register_skill(skill)
    logger.info(f"Loaded {len(BUILTIN_SKILLS)} built-in skills")
    return registry
