"""Resolution of requested paths against the remote base directory."""

import posixpath

from sftp_gateway.errors import PathTraversalError


def _is_within(path: str, base_dir: str) -> bool:
    base = base_dir.rstrip("/")
    return path == base or path.startswith(base + "/")


def resolve_remote_path(base_dir: str, requested_path: str) -> str:
    """
    Join a requested path onto the remote base directory.

    Any ".." component is rejected outright, even one that would stay
    inside the base directory. The joined result must also still lie
    under the base directory, which rules out absolute requested paths.

    Args:
        base_dir: Absolute remote base directory
        requested_path: Client-supplied, URL-decoded relative path

    Returns:
        Absolute remote path

    Raises:
        PathTraversalError: If the path could escape the base directory
    """
    if ".." in requested_path.split("/"):
        raise PathTraversalError(requested_path)

    remote_path = posixpath.join(base_dir, requested_path)
    if not _is_within(remote_path, base_dir):
        raise PathTraversalError(requested_path)

    return remote_path
