"""Thin NETCONF session adapter over ncclient.

Every failure below this module (ncclient, paramiko, sockets, RPC errors and
reply timeouts) surfaces as ``TransportError`` carrying the host.
"""
import logging
import socket
from typing import Any, Optional

import paramiko
from ncclient import NCClientError, manager

from ..config.settings import Settings
from ..errors import TransportError
from ..utils.connection import connect_retry

logger = logging.getLogger(__name__)

NETCONF_BASE_NS = "urn:ietf:params:xml:ns:netconf:base:1.0"

TRANSPORT_FAILURES = (NCClientError, paramiko.SSHException, socket.error, EOFError)


def wrap_config(payload: str) -> str:
    """Wrap a configuration fragment in a NETCONF ``<config>`` element."""
    return f'<config xmlns="{NETCONF_BASE_NS}">{payload}</config>'


class NetconfSession:
    """One NETCONF session to one device."""

    def __init__(self, manager_session: Any, host: str, rpc_timeout: float = 30):
        self._manager = manager_session
        self.host = host
        self._manager.timeout = rpc_timeout

    @classmethod
    def connect(cls, target, settings: Optional[Settings] = None) -> "NetconfSession":
        """Open a session to a DeviceTarget, retrying transient failures.

        Raises:
            TransportError: Connection could not be established
        """
        settings = settings or Settings()
        mgmt = target.management

        @connect_retry(settings)
        def _open():
            return manager.connect(
                host=mgmt.ip_address,
                port=mgmt.port,
                username=mgmt.username,
                password=target.secret,
                hostkey_verify=False,
                allow_agent=False,
                look_for_keys=False,
                timeout=settings.connect_timeout,
            )

        logger.debug(f"Connecting to {mgmt.ip_address}:{mgmt.port} as {mgmt.username}")
        try:
            session = _open()
        except TRANSPORT_FAILURES as e:
            raise TransportError(
                f"Connection to {mgmt.ip_address}:{mgmt.port} failed: {e}",
                target=mgmt.ip_address,
            ) from e

        logger.info(f"NETCONF session established with {mgmt.ip_address}")
        return cls(session, host=mgmt.ip_address, rpc_timeout=settings.rpc_timeout)

    def edit_config(
        self,
        payload: str,
        datastore: str = "running",
        default_operation: str = "merge",
    ) -> str:
        """Apply a configuration fragment; returns the raw reply."""
        try:
            reply = self._manager.edit_config(
                config=wrap_config(payload),
                target=datastore,
                default_operation=default_operation,
            )
        except TRANSPORT_FAILURES as e:
            raise TransportError(f"edit-config on {self.host} failed: {e}", target=self.host) from e

        if not getattr(reply, "ok", True):
            raise TransportError(f"edit-config on {self.host} rejected: {reply.xml}", target=self.host)
        return reply.xml

    def get_config(self, datastore: str = "running", subtree: Optional[str] = None) -> str:
        """Fetch a datastore, optionally filtered by a subtree."""
        filter_spec = ("subtree", subtree) if subtree else None
        try:
            reply = self._manager.get_config(source=datastore, filter=filter_spec)
        except TRANSPORT_FAILURES as e:
            raise TransportError(f"get-config on {self.host} failed: {e}", target=self.host) from e
        return reply.data_xml

    def close(self) -> None:
        try:
            self._manager.close_session()
        except TRANSPORT_FAILURES as e:
            logger.warning(f"Closing session to {self.host} failed: {e}")

    def __enter__(self) -> "NetconfSession":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
