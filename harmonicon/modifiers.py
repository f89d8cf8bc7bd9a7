# ===============================
# File: harmonicon/modifiers.py
# ===============================
"""
Chord modifier keys held from two physical sources.

    inv1  first-inversion request    (Alt on the keyboard)
    inv2  second-inversion request   (Shift)
    ext7  seventh-chord mode         (Tab)
    ext9  ninth-chord mode           (9)

Each flag is active while at least one source (keyboard or on-screen pointer)
holds it. ext9 excludes the three others: it clears them when it activates
and they cannot activate while it is on.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Set, Tuple
import logging

log = logging.getLogger(__name__)


class Modifier(str, Enum):
    INV1 = "inv1"
    INV2 = "inv2"
    EXT7 = "ext7"
    EXT9 = "ext9"


class ModifierSource(str, Enum):
    KEYBOARD = "keyboard"
    POINTER = "pointer"


@dataclass(frozen=True)
class ModifierRule:
    blocked_by: Tuple[Modifier, ...] = ()
    clears_on_activate: Tuple[Modifier, ...] = ()
    # block only when the blocking flag is held by the requesting source
    same_source_block: bool = False
    notifies: bool = False


RULES: Dict[Modifier, ModifierRule] = {
    Modifier.INV1: ModifierRule(blocked_by=(Modifier.EXT9,)),
    Modifier.INV2: ModifierRule(blocked_by=(Modifier.EXT9,)),
    Modifier.EXT7: ModifierRule(blocked_by=(Modifier.EXT9,), notifies=True),
    Modifier.EXT9: ModifierRule(
        blocked_by=(Modifier.INV1, Modifier.INV2, Modifier.EXT7),
        clears_on_activate=(Modifier.INV1, Modifier.INV2, Modifier.EXT7),
        same_source_block=True,
        notifies=True,
    ),
}

Listener = Callable[[Modifier, bool], None]


@dataclass
class ModifierStateMachine:
    held: Dict[Modifier, Set[ModifierSource]] = field(
        default_factory=lambda: {m: set() for m in Modifier})
    _listeners: List[Listener] = field(default_factory=list, repr=False)

    # ---- queries ---------------------------------------------------------
    def is_active(self, modifier: Modifier | str) -> bool:
        return bool(self.held[Modifier(modifier)])

    @property
    def inv1(self) -> bool:
        return self.is_active(Modifier.INV1)

    @property
    def inv2(self) -> bool:
        return self.is_active(Modifier.INV2)

    @property
    def ext7(self) -> bool:
        return self.is_active(Modifier.EXT7)

    @property
    def ext9(self) -> bool:
        return self.is_active(Modifier.EXT9)

    def current_inversion(self) -> int:
        """0 in ninth mode; inv1+inv2 is third inversion with ext7, else clamped to second."""
        if self.ext9:
            return 0
        if self.inv1 and self.inv2:
            return 3 if self.ext7 else 2
        if self.inv2:
            return 2
        if self.inv1:
            return 1
        return 0

    # ---- listeners -------------------------------------------------------
    def add_listener(self, listener: Listener) -> Callable[[], None]:
        """Called with (modifier, active) on ext7 / ext9 transitions. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)
        return remove

    # ---- transitions -----------------------------------------------------
    def _blocked(self, modifier: Modifier, source: ModifierSource) -> bool:
        rule = RULES[modifier]
        for other in rule.blocked_by:
            if rule.same_source_block:
                if source in self.held[other]:
                    return True
            elif self.held[other]:
                return True
        return False

    def _changed(self, modifier: Modifier, was_active: bool) -> None:
        now = self.is_active(modifier)
        if now == was_active:
            return
        log.debug("modifier %s -> %s", modifier.value, "on" if now else "off")
        if RULES[modifier].notifies:
            for fn in list(self._listeners):
                fn(modifier, now)

    def _clear(self, modifier: Modifier) -> None:
        was = self.is_active(modifier)
        self.held[modifier].clear()
        self._changed(modifier, was)

    def set(self, modifier: Modifier | str, source: ModifierSource | str, pressed: bool) -> bool:
        """Press or release one sub-source. Returns False when the press was blocked."""
        modifier, source = Modifier(modifier), ModifierSource(source)
        if pressed:
            if self._blocked(modifier, source):
                log.debug("modifier %s blocked (%s)", modifier.value, source.value)
                return False
            for other in RULES[modifier].clears_on_activate:
                self._clear(other)
        was = self.is_active(modifier)
        if pressed:
            self.held[modifier].add(source)
        else:
            self.held[modifier].discard(source)
        self._changed(modifier, was)
        return True

    def press(self, modifier: Modifier | str, source: ModifierSource | str) -> bool:
        return self.set(modifier, source, True)

    def release(self, modifier: Modifier | str, source: ModifierSource | str) -> bool:
        return self.set(modifier, source, False)

    def reset_all(self) -> None:
        for m in Modifier:
            self._clear(m)
