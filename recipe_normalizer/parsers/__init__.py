"""Field normalizers for Schema.org Recipe nodes."""
