"""Alerts, daily progress and cross-metric insights."""
