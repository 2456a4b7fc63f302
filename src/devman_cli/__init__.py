"""devman - enroll SSH-managed devices into a local device registry."""

__version__ = "0.1.0"
