"""appbin - build userspace applications into kernel app binaries."""

__version__ = "0.1.0"
