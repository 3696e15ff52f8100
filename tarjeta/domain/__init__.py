"""Pure domain rules: vCard encoding, contact and profile validation."""
