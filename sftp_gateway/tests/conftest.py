"""Shared fixtures: in-memory stand-ins for a remote SFTP server."""

import errno
import io
import stat

import paramiko
import pytest

from sftp_gateway.config import GatewayConfig, SFTPConfig


class FakeHandle(io.BytesIO):
    """Remote file handle that records reads, optionally failing on the second."""

    def __init__(self, content, read_error=None):
        super().__init__(content)
        self.reads = 0
        self.read_error = read_error

    def read(self, size=-1):
        self.reads += 1
        if self.read_error and self.reads > 1:
            raise self.read_error
        return super().read(size)


class FakeSFTP:
    """Minimal SFTP channel serving an in-memory tree."""

    def __init__(self, files=None, dirs=(), modes=None):
        self.files = dict(files or {})
        self.dirs = set(dirs)
        self.modes = dict(modes or {})
        self.handles = []
        self.open_error = None
        self.stat_error = None
        self.read_error = None
        self.closed = False

    def stat(self, path):
        if self.stat_error:
            raise self.stat_error

        attrs = paramiko.SFTPAttributes()
        if path in self.modes:
            attrs.st_mode = self.modes[path]
        elif path in self.files:
            attrs.st_mode = stat.S_IFREG | 0o644
            attrs.st_size = len(self.files[path])
        elif path in self.dirs:
            attrs.st_mode = stat.S_IFDIR | 0o755
        else:
            raise IOError(errno.ENOENT, "No such file")
        return attrs

    def open(self, path, mode="r"):
        if self.open_error:
            raise self.open_error
        handle = FakeHandle(self.files[path], self.read_error)
        self.handles.append(handle)
        return handle

    def close(self):
        self.closed = True


class FakeClient:
    """Connected-client stand-in handed out by FakeClientFactory."""

    def __init__(self, sftp):
        self.sftp = sftp
        self.disconnects = 0

    def disconnect(self):
        self.disconnects += 1


class FakeClientFactory:
    """Client factory for DownloadService that never touches the network."""

    def __init__(self, sftp, error=None):
        self.sftp = sftp
        self.error = error
        self.clients = []

    def __call__(self, config, host_key_policy):
        if self.error:
            raise self.error
        client = FakeClient(self.sftp)
        self.clients.append(client)
        return client


@pytest.fixture
def sftp_config():
    return SFTPConfig(
        host="sftp.example.com",
        username="reader",
        password="secret",
        remote_path="/srv/files",
    )


@pytest.fixture
def gateway_config(sftp_config):
    return GatewayConfig(sftp=sftp_config)


@pytest.fixture
def fake_sftp():
    return FakeSFTP(
        files={
            "/srv/files/foo.txt": b"hello world\n" * 1000,
            "/srv/files/docs/readme.md": b"# readme\n",
            "/srv/files/empty.bin": b"",
        },
        dirs={"/srv/files", "/srv/files/docs"},
        modes={"/srv/files/fifo": stat.S_IFIFO | 0o600},
    )
