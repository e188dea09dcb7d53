"""
Lookups that ask external tools about a process.

Both resolvers block on a sub-process and return '' on any failure.
"""

import logging

from procinspect.commands import CommandRunner, run_command

logger = logging.getLogger(__name__)

UNIT_SUFFIX = ".service"
LOADED_MARKER = "Loaded:"

DOCKER_PROXY_COMM = "docker-proxy"
CONTAINER_IP_FLAG = "-container-ip"
DOCKER_NETWORK_FORMAT = '{{range .Containers}}{{.Name}}:{{.IPv4Address}}{{"\\n"}}{{end}}'


def parse_service_unit(output: str) -> str:
    """
    Extract the unit name from `systemctl status` output.

    Looks at the first 'Loaded:' line naming a .service file, e.g.

        Loaded: loaded (/lib/systemd/system/ssh.service; enabled; preset: enabled)

    and returns 'ssh.service'.
    """
    if "Loaded: loaded" not in output:
        return ""
    for line in output.splitlines():
        line = line.lstrip()
        if not line.startswith(LOADED_MARKER) or UNIT_SUFFIX not in line:
            continue
        for token in line.split():
            token = token.strip("();,")
            if token.endswith(UNIT_SUFFIX):
                return token.rsplit("/", 1)[-1]
    return ""


def resolve_service_unit(
    pid: int,
    runner: CommandRunner = run_command,
    systemctl: str = "systemctl",
) -> str:
    """Return the service unit the service manager associates with pid, or ''."""
    result = runner([systemctl, "status", str(pid)])
    if not result.ok:
        logger.debug("%s status %d exited %d", systemctl, pid, result.returncode)
        return ""
    return parse_service_unit(result.stdout + result.stderr)


def parse_container_ip(cmdline: str) -> str:
    """Return the address following -container-ip in a docker-proxy command line."""
    args = cmdline.split()
    for i, arg in enumerate(args[:-1]):
        if arg == CONTAINER_IP_FLAG:
            return args[i + 1]
    return ""


def match_container(inventory: str, container_ip: str) -> str:
    """
    Find the container owning container_ip in a network listing.

    Args:
        inventory: One 'name:address/prefix' entry per line.
        container_ip: Bare address to look for.

    Returns:
        The container name, or '' if no entry matches.
    """
    for line in inventory.strip().splitlines():
        name, sep, address = line.strip().partition(":")
        if not sep:
            continue
        if address.split("/", 1)[0] == container_ip:
            return name
    return ""


def resolve_docker_proxy_target(
    cmdline: str,
    runner: CommandRunner = run_command,
    docker: str = "docker",
    network: str = "bridge",
) -> str:
    """
    Name the container a docker-proxy process forwards to.

    Returns:
        'target: <name>' on a match, otherwise ''.
    """
    container_ip = parse_container_ip(cmdline)
    if not container_ip:
        return ""

    result = runner([docker, "network", "inspect", network, "--format", DOCKER_NETWORK_FORMAT])
    if not result.ok:
        logger.debug("%s network inspect %s exited %d", docker, network, result.returncode)
        return ""

    name = match_container(result.stdout, container_ip)
    return f"target: {name}" if name else ""
