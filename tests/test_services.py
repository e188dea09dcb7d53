"""Tests for the service-manager and container-runtime lookups."""

import sys

from fakes import FakeRunner
from procinspect.commands import NOT_RUN, CommandResult, run_command
from procinspect.services import (
    DOCKER_NETWORK_FORMAT,
    match_container,
    parse_container_ip,
    parse_service_unit,
    resolve_docker_proxy_target,
    resolve_service_unit,
)

SYSTEMCTL_OUTPUT = """\
● ssh.service - OpenBSD Secure Shell server
     Loaded: loaded (/lib/systemd/system/ssh.service; enabled; preset: enabled)
     Active: active (running) since Mon 2024-01-01 10:00:00 UTC; 2h ago
   Main PID: 812 (sshd)
      Tasks: 1 (limit: 4915)
     CGroup: /system.slice/ssh.service
             └─812 "sshd: /usr/sbin/sshd -D [listener] 0 of 10-100 startups"
"""

SCOPE_OUTPUT = """\
● session-2.scope - Session 2 of User alice
     Loaded: loaded (/run/systemd/transient/session-2.scope; transient)
  Transient: yes
     Active: active (running) since Mon 2024-01-01 10:00:00 UTC; 2h ago
"""

DOCKER_CMDLINE = (
    "/usr/bin/docker-proxy -proto tcp -host-ip 0.0.0.0 -host-port 8080 "
    "-container-ip 172.17.0.5 -container-port 80"
)


class TestParseServiceUnit:
    """Tests for parse_service_unit."""

    def test_extracts_unit_name(self):
        """Test the unit file name is taken from the Loaded line."""
        assert parse_service_unit(SYSTEMCTL_OUTPUT) == "ssh.service"

    def test_bare_unit_token(self):
        """Test a Loaded line with a bare unit token."""
        output = "Loaded: loaded cron.service\n"
        assert parse_service_unit(output) == "cron.service"

    def test_scope_is_not_a_service(self):
        """Test a transient scope yields no unit."""
        assert parse_service_unit(SCOPE_OUTPUT) == ""

    def test_not_loaded(self):
        """Test units that are not loaded yield no unit."""
        output = "     Loaded: not-found (Reason: Unit ghost.service not found.)\n"
        assert parse_service_unit(output) == ""

    def test_empty_output(self):
        """Test empty output yields no unit."""
        assert parse_service_unit("") == ""


class TestResolveServiceUnit:
    """Tests for resolve_service_unit."""

    def test_queries_systemctl_for_pid(self):
        """Test systemctl status is invoked with the pid."""
        runner = FakeRunner({"systemctl": CommandResult(0, SYSTEMCTL_OUTPUT, "")})

        assert resolve_service_unit(812, runner) == "ssh.service"
        assert runner.calls == [["systemctl", "status", "812"]]

    def test_custom_binary(self):
        """Test the systemctl binary name can be changed."""
        runner = FakeRunner({"/bin/systemctl": CommandResult(0, SYSTEMCTL_OUTPUT, "")})

        assert resolve_service_unit(812, runner, systemctl="/bin/systemctl") == "ssh.service"

    def test_nonzero_exit(self):
        """Test a failing systemctl yields ''."""
        runner = FakeRunner({"systemctl": CommandResult(4, SYSTEMCTL_OUTPUT, "")})

        assert resolve_service_unit(812, runner) == ""

    def test_missing_systemctl(self, runner):
        """Test a missing systemctl yields ''."""
        assert resolve_service_unit(812, runner) == ""


class TestDockerProxy:
    """Tests for the docker-proxy resolver."""

    def test_parse_container_ip(self):
        """Test the address after -container-ip is found."""
        assert parse_container_ip(DOCKER_CMDLINE) == "172.17.0.5"

    def test_parse_container_ip_absent(self):
        """Test no flag yields ''."""
        assert parse_container_ip("/usr/bin/docker-proxy -proto tcp") == ""

    def test_parse_container_ip_dangling_flag(self):
        """Test a trailing flag without a value yields ''."""
        assert parse_container_ip("/usr/bin/docker-proxy -container-ip") == ""

    def test_match_container_strips_prefix(self):
        """Test /prefix notation is removed before comparing."""
        inventory = "db:172.17.0.4/16\nweb:172.17.0.5/16\n"
        assert match_container(inventory, "172.17.0.5") == "web"

    def test_match_container_ignores_malformed_lines(self):
        """Test lines without a colon are skipped."""
        assert match_container("garbage\n\nweb:172.17.0.5/16", "172.17.0.5") == "web"

    def test_resolves_target(self):
        """Test a matching container produces 'target: <name>'."""
        runner = FakeRunner({"docker": CommandResult(0, "web:172.17.0.5/16\n", "")})

        assert resolve_docker_proxy_target(DOCKER_CMDLINE, runner) == "target: web"
        assert runner.calls == [
            ["docker", "network", "inspect", "bridge", "--format", DOCKER_NETWORK_FORMAT]
        ]

    def test_no_matching_container(self):
        """Test a non-matching address yields ''."""
        runner = FakeRunner({"docker": CommandResult(0, "web:172.17.0.9/16\n", "")})

        assert resolve_docker_proxy_target(DOCKER_CMDLINE, runner) == ""

    def test_docker_failure(self):
        """Test a failing docker command yields ''."""
        runner = FakeRunner({"docker": CommandResult(1, "", "Cannot connect to the Docker daemon")})

        assert resolve_docker_proxy_target(DOCKER_CMDLINE, runner) == ""

    def test_no_flag_skips_docker(self, runner):
        """Test docker is not queried without -container-ip."""
        assert resolve_docker_proxy_target("/usr/bin/docker-proxy", runner) == ""
        assert runner.calls == []

    def test_format_template(self):
        """Test the inspect template emits one name:address per line."""
        assert DOCKER_NETWORK_FORMAT == (
            '{{range .Containers}}{{.Name}}:{{.IPv4Address}}{{"\\n"}}{{end}}'
        )


class TestRunCommand:
    """Tests for run_command."""

    def test_captures_output(self):
        """Test stdout and the return code are captured."""
        result = run_command([sys.executable, "-c", "print('hello')"])

        assert result.ok
        assert result.stdout.strip() == "hello"

    def test_nonzero_exit(self):
        """Test a failing command reports its return code."""
        result = run_command([sys.executable, "-c", "import sys; sys.exit(3)"])

        assert result.returncode == 3
        assert not result.ok

    def test_missing_binary(self):
        """Test a missing binary is reported, not raised."""
        result = run_command(["procinspect-no-such-binary"])

        assert result.returncode == NOT_RUN

    def test_timeout(self):
        """Test an expired timeout is reported, not raised."""
        result = run_command([sys.executable, "-c", "import time; time.sleep(5)"], timeout=0.2)

        assert result.returncode == NOT_RUN
        assert "timed out" in result.stderr

    def test_path_through_a_file(self, tmp_path):
        """Test a program path that crosses a regular file is reported, not raised."""
        not_a_dir = tmp_path / "plain-file"
        not_a_dir.write_text("")

        result = run_command([str(not_a_dir / "systemctl"), "status", "1"])

        assert result.returncode == NOT_RUN
        assert result.stderr

    def test_not_executable(self, tmp_path):
        """Test a program without the execute bit is reported, not raised."""
        script = tmp_path / "docker"
        script.write_text("#!/bin/sh\necho hi\n")
        script.chmod(0o644)

        assert run_command([str(script)]).returncode == NOT_RUN
