"""Stateless analytics engine over normalized issue and sprint collections."""
