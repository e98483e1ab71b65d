"""FuelFlow: prepaid fuel tokens with QR redemption."""
