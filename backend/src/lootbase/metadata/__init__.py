"""Collection metadata loaded from YAML."""
