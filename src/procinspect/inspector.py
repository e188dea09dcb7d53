"""Assemble a Process record from every reader."""

import functools
import logging
from collections.abc import Callable, Sequence

from procinspect import procfs
from procinspect.classify import classify_cgroup, classify_fork, classify_health
from procinspect.commands import CommandResult, CommandRunner, run_command
from procinspect.config import Settings
from procinspect.errors import ProcessNotFoundError
from procinspect.gitcontext import resolve_git_context
from procinspect.host import HostEnvironment, detect_host
from procinspect.models import GitContext, Process
from procinspect.services import (
    DOCKER_PROXY_COMM,
    resolve_docker_proxy_target,
    resolve_service_unit,
)
from procinspect.sockets import (
    SocketLister,
    SocketTableReader,
    correlate_sockets,
    list_socket_inodes,
    read_socket_table,
)

logger = logging.getLogger(__name__)


class ProcessInspector:
    """
    Builds Process records for single pids.

    Holds no state between calls; every collaborator can be injected so the
    whole pipeline runs against a fake /proc tree and fake commands.
    Only a missing or malformed stat record raises. Every other source that
    fails leaves its field at the default.
    """

    def __init__(
        self,
        host: HostEnvironment | None = None,
        settings: Settings | None = None,
        runner: CommandRunner | None = None,
        socket_table_reader: SocketTableReader | None = None,
        socket_lister: SocketLister | None = None,
        user_reader: Callable[[int], str] | None = None,
    ) -> None:
        """
        Initialize the ProcessInspector.

        Args:
            host: Boot time, tick rate and page size. Detected lazily if None.
            settings: Runtime settings. Defaults to Settings().
            runner: Executes systemctl/docker. Defaults to run_command with the
                configured timeout.
            socket_table_reader: Returns the inode -> address table.
            socket_lister: Returns the socket inodes open by a pid.
            user_reader: Resolves a pid to its owner's name.
        """
        self._settings = settings or Settings()
        self._host = host
        proc_root = self._settings.proc_root
        self._runner = runner or self._default_runner
        self._socket_table_reader = socket_table_reader or functools.partial(
            read_socket_table, proc_root
        )
        self._socket_lister = socket_lister or functools.partial(
            list_socket_inodes, proc_root=proc_root
        )
        self._user_reader = user_reader or functools.partial(
            procfs.read_user, proc_root=proc_root
        )

    @property
    def settings(self) -> Settings:
        """Get the settings in use."""
        return self._settings

    @property
    def host(self) -> HostEnvironment:
        """Get the host environment, detecting it on first use."""
        if self._host is None:
            self._host = detect_host()
        return self._host

    def _default_runner(self, cmd: Sequence[str]) -> CommandResult:
        return run_command(cmd, timeout=self._settings.command_timeout)

    def _read_user(self, pid: int) -> str:
        try:
            return self._user_reader(pid)
        except Exception as exc:
            logger.debug("owner of pid %d unresolved: %s", pid, exc)
            return procfs.UNKNOWN

    def inspect(self, pid: int) -> Process:
        """
        Inspect one process.

        Raises:
            ProcessNotFoundError: If pid is negative or has no readable stat record.
            StatParseError: If the stat record is malformed.
        """
        if pid < 0:
            raise ProcessNotFoundError(pid, "pid must be non-negative")

        proc_root = self._settings.proc_root
        stat = procfs.read_stat(pid, proc_root)
        host = self.host

        env = procfs.read_environment(pid, proc_root)
        working_dir = procfs.read_working_directory(pid, proc_root)
        cmdline = procfs.read_cmdline(pid, proc_root)

        container = classify_cgroup(procfs.read_cgroup(pid, proc_root))
        service = resolve_service_unit(pid, self._runner, self._settings.systemctl)

        git = GitContext()
        if working_dir != procfs.UNKNOWN:
            git = resolve_git_context(working_dir)

        user = self._read_user(pid)
        ports, addresses = correlate_sockets(pid, self._socket_table_reader, self._socket_lister)

        if stat.comm == DOCKER_PROXY_COMM and not container:
            container = resolve_docker_proxy_target(
                cmdline,
                self._runner,
                self._settings.docker,
                self._settings.docker_network,
            )

        process = Process(
            pid=pid,
            ppid=stat.ppid,
            command=stat.comm,
            cmdline=cmdline,
            started_at=host.start_time(stat.start_ticks),
            user=user,
            working_dir=working_dir,
            git_repo=git.repo,
            git_branch=git.branch,
            container=container,
            service=service,
            ports=ports,
            addresses=addresses,
            health=classify_health(stat, host),
            forked=classify_fork(stat.ppid, stat.comm),
            env=tuple(env),
        )
        logger.debug("inspected pid %d (%s): %s", pid, process.command, process.health.value)
        return process


def read_process(pid: int, settings: Settings | None = None) -> Process:
    """Inspect pid with the default collaborators."""
    return ProcessInspector(settings=settings or Settings.from_env()).inspect(pid)
