import ipaddress
import socket
import time
from collections.abc import Callable

from tenacity import (
    RetryError,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
)

from ..core import DEFAULT_READY_ATTEMPTS, DEFAULT_READY_DELAY, DEFAULT_SSH_PORT
from ..errors import ProvisioningTimeoutError
from ..logger import logger
from ..provider import Connection
from ..schemas.compute import GCPServer
from ..schemas.state import InstanceState

Probe = Callable[[str, int], bool]


class NotReady(Exception):
    pass


def tcp_probe(host: str, port: int, timeout: float = 5.0) -> bool:
    """True if something accepts a TCP connection on host:port."""
    try:
        with socket.create_connection((host, port), timeout=timeout):
            return True
    except OSError:
        return False


def _is_ipv4(value: str) -> bool:
    try:
        ipaddress.IPv4Address(value)
    except ValueError:
        return False
    return True


def _check(connection: Connection, name: str, probe: Probe, port: int) -> str:
    server = connection.get_server(name)
    addresses = server.addresses
    if not addresses:
        raise NotReady(f"{name} has no address yet (status {server.status})")

    address = addresses[0]
    if not _is_ipv4(address):
        raise NotReady(f"{name} reported a malformed address: {address!r}")

    if not probe(address, port):
        raise NotReady(f"{address}:{port} is not accepting connections")

    return address


def wait_for_up_instance(
    connection: Connection,
    server: GCPServer,
    state: InstanceState,
    attempts: int = DEFAULT_READY_ATTEMPTS,
    delay: float = DEFAULT_READY_DELAY,
    sleep: Callable[[float], None] = time.sleep,
    probe: Probe = tcp_probe,
    port: int = DEFAULT_SSH_PORT,
) -> None:
    """
    Polls the server until it has an address that accepts connections on
    `port`, then records it as state.hostname.

    Raises ProvisioningTimeoutError after `attempts` failed checks. The
    state is only written on success.
    """
    retrying = Retrying(
        stop=stop_after_attempt(attempts),
        wait=wait_fixed(delay),
        sleep=sleep,
        retry=retry_if_exception_type(NotReady),
        before_sleep=lambda rs: logger.info(
            f"Waiting for {server.name} ({rs.attempt_number}/{attempts}): "
            f"{rs.outcome.exception()}"
        ),
    )

    try:
        address = retrying(_check, connection, server.name, probe, port)
    except RetryError as e:
        raise ProvisioningTimeoutError(
            f"Instance {server.name} not reachable after {attempts} attempts: "
            f"{e.last_attempt.exception()}"
        ) from e

    state.hostname = address
    logger.info(f"Instance {server.name} is ready at {address}:{port}")
