# Supabase table: users (extends auth.users)
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py
# Authentication is handled by Supabase Auth (auth.users table)

"""
Expected Supabase table structure:

users:
- id: uuid (primary key, references auth.users.id ON DELETE CASCADE)
- email: text (not null)
- first_name: text (nullable)
- last_name: text (nullable)
- company_name: text (nullable) - workspace name, set during onboarding
- subscription_tier: text ('free' | 'trial' | 'business' | 'business_premium', default 'trial')
- trial_ends_at: timestamp (nullable)
- currency_preference: text ('USD' | 'EUR' | 'GBP' | 'CAD', default 'USD')
- financial_year_end: text ('MM-DD', default '12-31')
- tax_rate: decimal (default 30.0)
- created_at: timestamp (default: now())
- updated_at: timestamp (trigger-maintained)
"""
