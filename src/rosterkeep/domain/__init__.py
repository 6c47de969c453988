"""Domain layer: records, identity matching, reconciliation and roster services."""
