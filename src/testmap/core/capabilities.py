"""
Capability tagging from structural signals in a test.

Cross-cutting capabilities (those that apply to tests owned by many
components) are defined once here instead of in every component's matchers.
The tagger reads bracketed markers in the test name and the job variants the
test ran under; it never fails, and unrecognized input contributes nothing.

Built-in heuristics:
    - ``[Feature:X]`` and ``[FeatureGate:X]`` markers contribute ``X``
    - well-known name markers (``[Conformance]``, ``[Serial]``, ``[Disruptive]``,
      ``[Early]``, ``[Late]``, ``[invariant]``) contribute a capability each
    - upgrade tests (``upgrade`` in the name, or an ``Upgrade:`` variant other
      than ``none``) contribute ``Upgrade``
    - selected variants (``NetworkStack:ipv6`` and ``NetworkStack:dual``)
      contribute their stack capability

Examples:
    >>> sorted(derive_capabilities(TestInfo(name="[sig-network][Feature:IPv6DualStack] works [Serial]")))
    ['IPv6DualStack', 'Serial']
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field

from testmap.core.models import TestInfo

_FEATURE_MARKER = re.compile(r"\[(?:Feature|FeatureGate):([^\]]+)\]")


@dataclass(frozen=True)
class CapabilityTagger:
    """Heuristic capability extraction.

    ``name_markers`` maps a literal substring of the test name to the
    capability it implies; ``variant_markers`` maps a ``Name:value`` variant to
    its capability.
    """

    name_markers: Mapping[str, str] = field(default_factory=dict, hash=False)
    variant_markers: Mapping[str, str] = field(default_factory=dict, hash=False)

    def derive(self, test: TestInfo) -> frozenset[str]:
        capabilities: set[str] = set()

        for feature in _FEATURE_MARKER.findall(test.name):
            feature = feature.strip()
            if feature:
                capabilities.add(feature)

        for marker, capability in self.name_markers.items():
            if marker in test.name:
                capabilities.add(capability)

        if "upgrade" in test.name.lower():
            capabilities.add("Upgrade")

        for variant in test.variants:
            capability = self.variant_markers.get(variant)
            if capability:
                capabilities.add(capability)
            key, sep, value = variant.partition(":")
            if sep and key == "Upgrade" and value and value != "none":
                capabilities.add("Upgrade")

        return frozenset(capabilities)


DEFAULT_TAGGER = CapabilityTagger(
    name_markers={
        "[Conformance]": "Conformance",
        "[Serial]": "Serial",
        "[Disruptive]": "Disruptive",
        "[Early]": "Early",
        "[Late]": "Late",
        "[invariant]": "Invariant",
    },
    variant_markers={
        "NetworkStack:ipv6": "IPv6",
        "NetworkStack:dual": "DualStack",
    },
)


def derive_capabilities(test: TestInfo, tagger: CapabilityTagger = DEFAULT_TAGGER) -> frozenset[str]:
    """Capabilities implied by the test itself, independent of any component."""
    return tagger.derive(test)
