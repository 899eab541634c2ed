import bz2

import pytest

from conftest import FakeClientFactory
from sftp_gateway.errors import (
    AuthFailureError,
    PathTraversalError,
    RemoteFileNotFoundError,
    RemoteProtocolError,
)
from sftp_gateway.services.download import DownloadService, download_filename
from sftp_gateway.services.transcoding import TranscodingStream
from sftp_gateway.sftp.fetcher import RemoteFileStream
from sftp_gateway.sftp.host_keys import AcceptAnyHostKey


@pytest.fixture
def factory(fake_sftp):
    return FakeClientFactory(fake_sftp)


@pytest.fixture
def service(gateway_config, factory):
    return DownloadService(gateway_config, client_factory=factory)


def test_plain_download(service, factory, fake_sftp):
    download = service.open_download("foo.txt")

    assert isinstance(download.stream, RemoteFileStream)
    assert download.filename == "foo.txt"
    assert download.remote_path == "/srv/files/foo.txt"
    assert not download.compressed
    assert b"".join(download.stream) == fake_sftp.files["/srv/files/foo.txt"]
    assert factory.clients[0].disconnects == 1


def test_compressed_download(service, fake_sftp):
    download = service.open_download("docs/readme.md.bz2")

    assert isinstance(download.stream, TranscodingStream)
    assert download.filename == "readme.md.bz2"
    assert download.remote_path == "/srv/files/docs/readme.md"
    assert download.compressed
    assert bz2.decompress(b"".join(download.stream)) == b"# readme\n"


def test_literal_bz2_file_is_not_served(service, fake_sftp):
    fake_sftp.files["/srv/files/archive.bz2"] = b"already compressed"

    with pytest.raises(RemoteFileNotFoundError):
        service.open_download("archive.bz2")


def test_traversal_never_opens_session(service, factory):
    with pytest.raises(PathTraversalError):
        service.open_download("../../etc/passwd")

    with pytest.raises(PathTraversalError):
        service.open_download("../../etc/passwd.bz2")

    assert factory.clients == []


def test_fetch_failure_closes_session(service, factory, fake_sftp):
    with pytest.raises(RemoteFileNotFoundError):
        service.open_download("missing.txt")

    fake_sftp.open_error = IOError(13, "Permission denied")
    with pytest.raises(RemoteProtocolError):
        service.open_download("foo.txt")

    assert [c.disconnects for c in factory.clients] == [1, 1]


def test_session_failure_propagates(gateway_config, fake_sftp):
    factory = FakeClientFactory(fake_sftp, error=AuthFailureError("failed to authenticate to remote server"))
    service = DownloadService(gateway_config, client_factory=factory)

    with pytest.raises(AuthFailureError):
        service.open_download("foo.txt")


def test_fresh_session_per_download(service, factory):
    service.open_download("foo.txt").stream.close()
    service.open_download("foo.txt").stream.close()

    assert len(factory.clients) == 2
    assert factory.clients[0] is not factory.clients[1]


def test_uses_configured_host_key_policy(gateway_config):
    assert isinstance(DownloadService(gateway_config).host_key_policy, AcceptAnyHostKey)


@pytest.mark.parametrize(
    "requested, expected",
    [
        ("foo.txt", "foo.txt"),
        ("a/b/foo.txt.bz2", "foo.txt.bz2"),
        ("dir/", "dir"),
    ],
)
def test_download_filename(requested, expected):
    assert download_filename(requested) == expected


@pytest.mark.parametrize("requested", ["foo.txt", "foo.txt.bz2"])
def test_streams_share_interface(service, factory, requested):
    with service.open_download(requested).stream as stream:
        assert not stream.closed
        assert next(iter(stream))

    assert stream.closed
    assert factory.clients[0].disconnects == 1
