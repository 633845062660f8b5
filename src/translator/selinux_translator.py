"""SELinux label translation for SELinux Translator MCP Server.

This module implements the translator used by the control plane. A real
translator would fill empty parts of SELinux options from the operating
system defaults in /etc/selinux. The control plane often runs in a container
and cannot read /etc/selinux on worker nodes, and even if it could, the nodes
may run a different distribution. This translator therefore only uses the
fields present in the provided options and never tries to default the rest.
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Tuple

import structlog

from .models import FieldConflict, LabelField, SELinuxOptions

LABEL_SEPARATOR = ":"
LABEL_FIELD_COUNT = len(LabelField)


class SELinuxLabelTranslator(ABC):
    """Translates SELinux options into file labels and compares them."""

    @abstractmethod
    def selinux_enabled(self) -> bool:
        """Return whether SELinux is enforced where labels are applied."""

    @abstractmethod
    def selinux_options_to_file_label(self, opts: Optional[SELinuxOptions]) -> str:
        """Convert SELinux options into a file label."""

    @abstractmethod
    def conflicts(self, label_a: str, label_b: str) -> bool:
        """Return True if two file labels conflict."""


def split_file_label(label: str) -> List[str]:
    """Split a file label into at most four fields.

    The level is the last field, so any separator inside it (as in
    ``s0:c1,c2``) stays part of the level. An empty label yields ``[""]``.
    """
    return label.split(LABEL_SEPARATOR, LABEL_FIELD_COUNT - 1)


def _aligned_fields(label_a: str, label_b: str) -> Tuple[List[str], List[str]]:
    """Split both labels and right-pad the shorter one with unspecified fields."""
    parts_a = split_file_label(label_a)
    parts_b = split_file_label(label_b)

    width = max(len(parts_a), len(parts_b))
    parts_a.extend([""] * (width - len(parts_a)))
    parts_b.extend([""] * (width - len(parts_b)))
    return parts_a, parts_b


class ControllerSELinuxTranslator(SELinuxLabelTranslator):
    """SELinux label translator for the cluster control plane.

    Missing label fields are treated as incomparable: they never conflict
    with anything, because the node that runs the workload may expand them
    to match the other label.
    """

    def __init__(self) -> None:
        """Initialize the controller translator."""
        self.logger = structlog.get_logger(self.__class__.__name__)

    def selinux_enabled(self) -> bool:
        """Return True.

        The controller must have been explicitly enabled, so expect that all
        nodes have SELinux enabled.
        """
        return True

    def selinux_options_to_file_label(self, opts: Optional[SELinuxOptions]) -> str:
        """Convert SELinux options into a file label.

        Fields are joined in user, role, type, level order without defaulting
        the missing ones. Empty options behave the same as no options and
        produce an empty label.

        Args:
            opts: SELinux options, or None if the workload has none

        Returns:
            File label such as ``system_u:system_r:container_t:s0:c1,c2``
        """
        if opts is None or opts.is_empty():
            return ""
        return LABEL_SEPARATOR.join(opts.field_values())

    def file_label_to_selinux_options(self, label: str) -> SELinuxOptions:
        """Recover SELinux options from a file label.

        Args:
            label: File label produced by selinux_options_to_file_label

        Returns:
            SELinux options with missing trailing fields left unspecified
        """
        parts = split_file_label(label)
        parts.extend([""] * (LABEL_FIELD_COUNT - len(parts)))
        return SELinuxOptions(**dict(zip([f.value for f in LabelField], parts)))

    def conflicts(self, label_a: str, label_b: str) -> bool:
        """Return True if two SELinux file labels conflict.

        Both labels must be produced by selinux_options_to_file_label, which
        emits a fixed number of fields. Missing fields are incomparable.
        ``system_u:system_r:container_t:s0:c1,c2`` does not conflict with
        ``:::s0:c1,c2``, because a node may expand the latter into the former.
        It does conflict with ``:::s0:c98,c99``.

        Args:
            label_a: First file label
            label_b: Second file label

        Returns:
            True if both labels specify some field with different values
        """
        parts_a, parts_b = _aligned_fields(label_a, label_b)

        for value_a, value_b in zip(parts_a, parts_b):
            if value_a == value_b:
                continue
            if value_a == "" or value_b == "":
                # incomparable, no conflict
                continue
            self.logger.debug(
                "SELinux labels conflict",
                label_a=label_a,
                label_b=label_b,
                value_a=value_a,
                value_b=value_b,
            )
            return True
        return False

    def conflicting_fields(self, label_a: str, label_b: str) -> List[FieldConflict]:
        """List every field in which two file labels conflict.

        Uses the same rules as conflicts(), but reports all conflicting
        fields instead of stopping at the first one.

        Args:
            label_a: First file label
            label_b: Second file label

        Returns:
            Conflicting fields in user, role, type, level order
        """
        parts_a, parts_b = _aligned_fields(label_a, label_b)
        found = []
        for field, value_a, value_b in zip(LabelField, parts_a, parts_b):
            if value_a == value_b or value_a == "" or value_b == "":
                continue
            found.append(
                FieldConflict(field=field, value_a=value_a, value_b=value_b)
            )
        return found


_default_translator = ControllerSELinuxTranslator()


def encode_label(opts: Optional[SELinuxOptions]) -> str:
    """Convert SELinux options into a file label."""
    return _default_translator.selinux_options_to_file_label(opts)


def labels_conflict(label_a: str, label_b: str) -> bool:
    """Return True if two SELinux file labels conflict."""
    return _default_translator.conflicts(label_a, label_b)


def is_enforced() -> bool:
    """Return whether the labeling scheme is treated as active."""
    return _default_translator.selinux_enabled()
