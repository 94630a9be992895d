"""
Reading and writing of the resolver file (resolv.conf(5) format).
"""
import ipaddress
import os
import tempfile
from typing import IO, Iterable, List

from router.config import DNSConfig, IPAddress
from router.errors import ResolvConfError

RESOLV_CONF = "/etc/resolv.conf"

# Must never mention the resolvconf tool by name, otherwise the detector
# would mistake our own file for one generated by it.
GENERATED_HEADER = (
    "# resolv.conf(5) file generated by vpn-router\n"
    "# DO NOT EDIT THIS FILE BY HAND -- CHANGES WILL BE OVERWRITTEN\n"
    "\n"
)


def format_config(nameservers: Iterable[IPAddress], domains: Iterable[str]) -> str:
    """
    Render nameservers and search domains in resolver file syntax

    Args:
        nameservers: Nameserver addresses, in order
        domains: Search domains, in order

    Returns:
        File content (without header)
    """
    lines = [f"nameserver {server}" for server in nameservers]
    domains = list(domains)
    if domains:
        lines.append("search " + " ".join(domains))
    return "".join(line + "\n" for line in lines)


def parse_config(text: str) -> DNSConfig:
    """
    Parse resolver file content

    Args:
        text: Content of a resolv.conf file

    Returns:
        DNSConfig with the nameservers and search domains found

    Raises:
        ResolvConfError: If a nameserver line does not hold an IP address
    """
    nameservers: List[IPAddress] = []
    domains: List[str] = []

    for line in text.splitlines():
        line = line.strip()
        if not line or line[0] in "#;":
            continue

        fields = line.split()
        if fields[0] == "nameserver":
            if len(fields) < 2:
                raise ResolvConfError(f"missing address in line: {line!r}")
            try:
                nameservers.append(ipaddress.ip_address(fields[1]))
            except ValueError as e:
                raise ResolvConfError(f"bad nameserver in line {line!r}: {e}") from e
        elif fields[0] == "search":
            # The last search line wins, as with the libc resolver.
            domains = fields[1:]

    return DNSConfig(nameservers=nameservers, domains=domains)


def read_config(path: str = RESOLV_CONF) -> DNSConfig:
    """
    Read and parse the resolver file

    Raises:
        ResolvConfError: If the file cannot be read or parsed
    """
    try:
        with open(path, "r") as f:
            return parse_config(f.read())
    except OSError as e:
        raise ResolvConfError(f"reading {path}: {e}") from e


def comment_block(f: IO[str]) -> List[str]:
    """
    Collect the leading comment lines of a resolver file

    Blank lines are skipped; the block ends at the first non-comment line.
    """
    comments = []
    for line in f:
        line = line.rstrip("\n")
        if not line:
            continue
        if not line.startswith("#"):
            break
        comments.append(line)
    return comments


def write_atomic(path: str, content: str) -> None:
    """
    Replace a file's content atomically

    The new content is written to a temporary file in the same directory
    and renamed over the target.
    """
    directory = os.path.dirname(path) or "."
    fd, tmp_path = tempfile.mkstemp(prefix=".resolv.", dir=directory)
    try:
        with os.fdopen(fd, "w") as f:
            f.write(content)
        os.chmod(tmp_path, 0o644)
        os.replace(tmp_path, path)
    except BaseException:
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise
