"""Business services: stores, report assembly, workflow and integrations."""
