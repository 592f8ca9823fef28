"""Cost calculation and tariff comparison."""
