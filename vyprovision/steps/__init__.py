"""
Installer steps, in the order the installer runs them.

Each step takes the immutable config/context plus a CommandRunner and raises
on the first failure.
"""
