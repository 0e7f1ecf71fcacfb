"""Uptime Monitor - HTTP endpoint availability watcher with status-change alerts."""

__version__ = "1.0.0"
