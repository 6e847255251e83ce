import random
import time
import uuid
from collections.abc import Callable
from typing import Any

from .clients import authenticate
from .errors import CollaboratorError
from .logger import logger
from .naming import generate_inst_name
from .provider import Authenticator, Connection
from .provisioners.disk import create_disk
from .provisioners.instance import create_instance
from .provisioners.readiness import Probe, tcp_probe, wait_for_up_instance
from .schemas.config import DriverConfig
from .schemas.state import InstanceState
from .zones import Chooser, select_zone


class GceDriver:
    """
    Creates and destroys one Compute Engine instance for a test suite.

    `instance_name` is the suite/platform name used as the base for
    generated instance names. The caller owns and persists the
    InstanceState handed to create/destroy.
    """

    def __init__(
        self,
        config: DriverConfig,
        instance_name: str = "default",
        authenticator: Authenticator = authenticate,
        sleep: Callable[[float], None] = time.sleep,
        probe: Probe = tcp_probe,
        rng: Chooser = random,  # type: ignore[assignment]
        uuid_factory: Callable[[], uuid.UUID] = uuid.uuid4,
    ) -> None:
        self.config = config
        self.instance_name = instance_name
        self._authenticator = authenticator
        self._sleep = sleep
        self._probe = probe
        self._rng = rng
        self._uuid_factory = uuid_factory
        self._connection: Connection | None = None

        # Resolved on the first create; the config itself stays untouched
        self.inst_name: str | None = config.inst_name
        self.zone_name: str | None = config.zone_name

    def __getitem__(self, key: str) -> Any:
        return self.config[key]

    @property
    def connection(self) -> Connection:
        if self._connection is None:
            credentials = self.config.credentials()
            logger.debug(
                f"Authenticating as {credentials.client_email} "
                f"for project {credentials.project}"
            )
            self._connection = self._authenticator(credentials)
        return self._connection

    def create(self, state: InstanceState) -> None:
        if state.server_id:
            logger.info(f"Instance {state.server_id} already exists, skipping create")
            return

        name = self.inst_name or generate_inst_name(
            self.instance_name, self._uuid_factory
        )
        zone = select_zone(self.config.area, zone_name=self.zone_name, rng=self._rng)
        self.inst_name, self.zone_name = name, zone

        connection = self.connection

        boot_disk = None
        if self.config.image_name:
            boot_disk = create_disk(
                connection,
                name=name,
                zone=zone,
                image=self.config.image_name,
                size_gb=self.config.disk_size,
            )

        server = create_instance(connection, self.config, name, zone, boot_disk)
        logger.info(f"GCE instance <{server.name}> created.")

        wait_for_up_instance(
            connection,
            server,
            state,
            attempts=self.config.ready_attempts,
            delay=self.config.ready_delay,
            sleep=self._sleep,
            probe=self._probe,
            port=self.config.ssh_port,
        )
        state.server_id = server.name

    def destroy(self, state: InstanceState) -> None:
        if not state.server_id:
            return

        server_id = state.server_id
        ack = self.connection.delete_server(server_id)
        if not ack.accepted:
            raise CollaboratorError(f"Delete of instance {server_id} was not accepted")

        logger.info(f"GCE instance <{server_id}> destroyed.")
        state.clear()
