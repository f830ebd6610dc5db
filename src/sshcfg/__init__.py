"""sshcfg - manage OpenSSH client config files in place."""

__version__ = "0.3.0"
