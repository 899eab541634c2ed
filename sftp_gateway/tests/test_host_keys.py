import paramiko
import pytest

from sftp_gateway.sftp.host_keys import (
    AcceptAnyHostKey,
    KnownHostsPolicy,
    build_host_key_policy,
)

KNOWN_KEY = paramiko.RSAKey.generate(1024)
OTHER_KEY = paramiko.RSAKey.generate(1024)


@pytest.fixture
def known_hosts(tmp_path):
    path = tmp_path / "known_hosts"
    path.write_text(
        f"sftp.example.com {KNOWN_KEY.get_name()} {KNOWN_KEY.get_base64()}\n"
        f"[backup.example.com]:2222 {KNOWN_KEY.get_name()} {KNOWN_KEY.get_base64()}\n"
    )
    return str(path)


def test_accept_any():
    assert AcceptAnyHostKey().is_acceptable("anything", 22, OTHER_KEY)


def test_known_hosts_accepts_listed_key(known_hosts):
    policy = KnownHostsPolicy(known_hosts)

    assert policy.is_acceptable("sftp.example.com", 22, KNOWN_KEY)


def test_known_hosts_rejects_changed_key(known_hosts):
    policy = KnownHostsPolicy(known_hosts)

    assert not policy.is_acceptable("sftp.example.com", 22, OTHER_KEY)


def test_known_hosts_rejects_unknown_host(known_hosts):
    policy = KnownHostsPolicy(known_hosts)

    assert not policy.is_acceptable("other.example.com", 22, KNOWN_KEY)


def test_known_hosts_non_default_port(known_hosts):
    policy = KnownHostsPolicy(known_hosts)

    assert policy.is_acceptable("backup.example.com", 2222, KNOWN_KEY)
    assert not policy.is_acceptable("backup.example.com", 22, KNOWN_KEY)
    assert not policy.is_acceptable("sftp.example.com", 2222, KNOWN_KEY)


def test_missing_known_hosts_file_rejects_everything(tmp_path):
    policy = KnownHostsPolicy(str(tmp_path / "absent"))

    assert not policy.is_acceptable("sftp.example.com", 22, KNOWN_KEY)


def test_build_policy(sftp_config, known_hosts):
    assert isinstance(build_host_key_policy(sftp_config), AcceptAnyHostKey)

    strict = sftp_config.model_copy(
        update={"host_key_policy": "known-hosts", "known_hosts_path": known_hosts}
    )
    policy = build_host_key_policy(strict)

    assert isinstance(policy, KnownHostsPolicy)
    assert policy.known_hosts_path == known_hosts
