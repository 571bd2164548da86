# Tracks newly created servers from "installing" to "running" in the background.
# Author: Asuna maintainers
# Date: 2026-10-18
# Version: 0.1.0

import asyncio
import time
from typing import TYPE_CHECKING, Dict, List, Optional, Protocol, Set

from asuna.core.config import Settings
from asuna.models.provisioning import ProvisioningPhase, ProvisioningSession
from asuna.utils.logger import console

if TYPE_CHECKING:
    from asuna.services.channels import OutputChannel
    from asuna.services.panel_gateway import PanelGateway


class Clock(Protocol):
    def now(self) -> float:
        ...

    async def sleep(self, seconds: float) -> None:
        ...


class SystemClock:
    """Monotonic wall clock backed by asyncio.sleep."""

    def now(self) -> float:
        return time.monotonic()

    async def sleep(self, seconds: float) -> None:
        await asyncio.sleep(seconds)


class ProvisioningMonitor:
    """
    State machine following one created server until it runs.

    Installing: poll the server listing until the server shows up with its
    installing flag cleared. AwaitingRunning: poll live state until it reports
    'running'; every 'offline' observation triggers one start signal, since
    install scripts can leave a server stopped. Both phases share a single
    time budget. Any exception moves the session to Failed.

    step() performs exactly one poll and returns the delay until the next one
    (None once terminal), so the machine can be driven by a virtual clock.
    run() drives it to completion and emits exactly one notification.
    """

    def __init__(self,
                 session: ProvisioningSession,
                 gateway: "PanelGateway",
                 channel: "OutputChannel",
                 settings: Settings,
                 clock: Optional[Clock] = None):
        self.session = session
        self._gateway = gateway
        self._channel = channel
        self._clock = clock or SystemClock()
        self._log = console.child(f"Provisioning {session.name}")
        self._install_interval = settings.PROVISION_INSTALL_POLL_SECONDS
        self._running_interval = settings.PROVISION_RUNNING_POLL_SECONDS
        self._timeout = settings.PROVISION_TIMEOUT_SECONDS

    @property
    def phase(self) -> ProvisioningPhase:
        return self.session.phase

    def elapsed(self) -> float:
        return self._clock.now() - self.session.started_at

    def _transition(self, phase: ProvisioningPhase):
        self._log.info(f"{self.session.phase.value} -> {phase.value}")
        self.session.phase = phase

    async def step(self) -> Optional[float]:
        if self.phase.is_terminal:
            return None
        if self.elapsed() >= self._timeout:
            self._transition(ProvisioningPhase.TIMED_OUT)
            return None

        self.session.polls += 1
        if self.phase is ProvisioningPhase.INSTALLING:
            delay = await self._poll_installation()
        else:
            delay = await self._poll_running()

        if delay is not None:
            self.session.next_wake_at = self._clock.now() + delay
        else:
            self.session.next_wake_at = None
        return delay

    async def _poll_installation(self) -> float:
        servers = await self._gateway.list_servers()
        server = next(
            (s for s in servers if s.uuid == self.session.server_uuid or s.identifier == self.session.identifier),
            None,
        )
        if server is None or server.is_installing:
            self._log.debug(f"Still installing ({self.elapsed():.0f}s elapsed).")
            return self._install_interval

        self._transition(ProvisioningPhase.AWAITING_RUNNING)
        return 0.0

    async def _poll_running(self) -> Optional[float]:
        state = await self._gateway.get_server_resources(self.session.identifier)
        current = state.current_state if state else None
        self.session.last_state = current

        if current == "running":
            self._transition(ProvisioningPhase.SUCCEEDED)
            return None
        if current == "offline":
            self._log.warning("Server is offline after install, sending start signal.")
            self.session.recovery_starts += 1
            await self._gateway.send_power_signal(self.session.identifier, "start")
        return self._running_interval

    async def run(self) -> ProvisioningPhase:
        self._log.info(f"Monitoring started for {self.session.identifier}.")
        try:
            while True:
                delay = await self.step()
                if delay is None:
                    break
                if delay > 0:
                    await self._clock.sleep(delay)
        except asyncio.CancelledError:
            self._log.warning("Monitoring cancelled.")
            raise
        except Exception:
            self._log.exception("Monitoring failed.")
            self._transition(ProvisioningPhase.FAILED)

        await self._notify()
        return self.phase

    def notification(self) -> str:
        name, identifier = self.session.name, self.session.identifier
        minutes = int(self._timeout // 60)
        if self.phase is ProvisioningPhase.SUCCEEDED:
            return f"✅ Your server **{name}** (`{identifier}`) has finished installing and is now running!"
        if self.phase is ProvisioningPhase.TIMED_OUT:
            return (f"⏰ Sorry, **{name}** (`{identifier}`) did not reach a running state within {minutes} minutes. "
                    f"It may still be installing; please check the panel.")
        return (f"❌ Sorry, something went wrong while I was watching **{name}** (`{identifier}`) get set up. "
                f"Please check the panel.")

    async def _notify(self):
        text = self.notification()
        try:
            await self._channel.send(text)
        except Exception:
            self._log.exception("Could not deliver the final notification.")


class MonitorPool:
    """
    Owns the background tasks of every live ProvisioningMonitor.

    At most one creation is in flight per server name (case-insensitive).
    reserve() claims a name synchronously, before the first panel call, so two
    concurrent requests cannot both create the same server; spawn() turns the
    reservation into a running monitor. Finished monitors are dropped from the
    pool; shutdown() cancels whatever is still running.
    """

    def __init__(self):
        self._monitors: Dict[str, ProvisioningMonitor] = {}
        self._tasks: Dict[str, "asyncio.Task[ProvisioningPhase]"] = {}
        self._reserved: Set[str] = set()

    @staticmethod
    def _key(name: str) -> str:
        return name.strip().casefold()

    def is_provisioning(self, name: str) -> bool:
        key = self._key(name)
        return key in self._monitors or key in self._reserved

    def reserve(self, name: str) -> bool:
        """Claims a server name for a creation in progress. False if it is already taken."""
        if self.is_provisioning(name):
            return False
        self._reserved.add(self._key(name))
        return True

    def release(self, name: str):
        self._reserved.discard(self._key(name))

    def spawn(self, monitor: ProvisioningMonitor) -> bool:
        key = self._key(monitor.session.name)
        if key in self._monitors:
            console.warning(f"A monitor for '{monitor.session.name}' is already running. Not starting another.")
            return False

        self._reserved.discard(key)
        task = asyncio.create_task(monitor.run(), name=f"provision-{monitor.session.identifier}")
        self._monitors[key] = monitor
        self._tasks[key] = task
        task.add_done_callback(lambda _: self._discard(key, task))
        return True

    def _discard(self, key: str, task: "asyncio.Task[ProvisioningPhase]"):
        if self._tasks.get(key) is task:
            del self._tasks[key]
            del self._monitors[key]

    def sessions(self) -> List[ProvisioningSession]:
        return [monitor.session for monitor in self._monitors.values()]

    def monitors(self) -> List[ProvisioningMonitor]:
        return list(self._monitors.values())

    async def wait_idle(self):
        """Waits for every live monitor to finish."""
        if self._tasks:
            await asyncio.gather(*self._tasks.values(), return_exceptions=True)

    async def shutdown(self):
        tasks = list(self._tasks.values())
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
            console.info(f"Cancelled {len(tasks)} provisioning monitor(s).")
