"""Doctor referral moderation and public directory service."""
