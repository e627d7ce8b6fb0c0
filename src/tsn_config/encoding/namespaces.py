"""YANG module name to XML namespace table."""
from typing import Optional

NAMESPACE_BY_MODULE: dict[str, str] = {
    "iana-crypt-hash": "urn:ietf:params:xml:ns:yang:iana-crypt-hash",
    "iana-hardware": "urn:ietf:params:xml:ns:yang:iana-hardware",
    "iana-if-type": "urn:ietf:params:xml:ns:yang:iana-if-type",
    "ieee1588-ptp-tt": "urn:ieee:std:1588:yang:ieee1588-ptp-tt",
    "ieee802-dot1ab-types": "urn:ieee:std:802.1Q:yang:ieee802-dot1ab-types",
    "ieee802-dot1as-gptp": "urn:ieee:std:802.1AS:yang:ieee802-dot1as-gptp",
    "ieee802-dot1as-hs": "urn:ieee:std:802.1AS:yang:ieee802-dot1as-hs",
    "ieee802-dot1dc-sched-if": "urn:ieee:std:802.1Q:yang:ieee802-dot1dc-sched-if",
    "ieee802-dot1q-bridge": "urn:ieee:std:802.1Q:yang:ieee802-dot1q-bridge",
    "ieee802-dot1q-sched": "urn:ieee:std:802.1Q:yang:ieee802-dot1q-sched",
    # The bridge augmentation lives in the scheduler namespace
    "ieee802-dot1q-sched-bridge": "urn:ieee:std:802.1Q:yang:ieee802-dot1q-sched",
    "ieee802-dot1q-stream-filters-gates": "urn:ieee:std:802.1Q:yang:ieee802-dot1q-stream-filters-gates",
    "ieee802-dot1q-types": "urn:ieee:std:802.1Q:yang:ieee802-dot1q-types",
    "ieee802-ethernet-interface": "urn:ieee:std:802.3:yang:ieee802-ethernet-interface",
    "ieee802-types": "urn:ieee:std:802.1Q:yang:ieee802-types",
    "iecieee60802-ethernet-interface": "urn:ieee:std:60802:yang:iecieee60802-ethernet-interface",
    "ietf-datastores": "urn:ietf:params:xml:ns:yang:ietf-datastores",
    "ietf-inet-types": "urn:ietf:params:xml:ns:yang:ietf-inet-types",
    "ietf-interfaces": "urn:ietf:params:xml:ns:yang:ietf-interfaces",
    "ietf-ip": "urn:ietf:params:xml:ns:yang:ietf-ip",
    "ietf-netconf-monitoring": "urn:ietf:params:xml:ns:yang:ietf-netconf-monitoring",
    "ietf-restconf": "urn:ietf:params:xml:ns:yang:ietf-restconf",
    "ietf-routing": "urn:ietf:params:xml:ns:yang:ietf-routing",
    "ietf-x509-cert-to-name": "urn:ietf:params:xml:ns:yang:ietf-x509-cert-to-name",
    "ietf-yang-patch": "urn:ietf:params:xml:ns:yang:ietf-yang-patch",
    "ietf-yang-schema-mount": "urn:ietf:params:xml:ns:yang:ietf-yang-schema-mount",
    "ietf-yang-types": "urn:ietf:params:xml:ns:yang:ietf-yang-types",
}


def resolve_namespace(key: str) -> tuple[Optional[str], str]:
    """Split a ``module:tag`` key into (namespace URI, tag).

    Unqualified keys and unknown modules resolve to (None, tag). For unknown
    modules the prefix is dropped so the element name stays valid.
    """
    module, sep, tag = key.partition(":")
    if not sep:
        return None, key
    return NAMESPACE_BY_MODULE.get(module), tag
