"""Built-in probe implementations."""

from .cpu import CpuCheck
from .disk_space import DiskSpaceCheck
from .graphite_threshold import GraphiteThresholdCheck
from .memory import MemoryCheck
from .ping_url import PingUrlCheck
from .tcp_ip import TcpIpCheck
