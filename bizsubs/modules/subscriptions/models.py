# Supabase table: subscriptions
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:
- id: uuid (primary key)
- user_id: uuid (foreign key to auth.users.id, not null)
- client_id: uuid (foreign key to clients.id, ON DELETE SET NULL, nullable)
- project_id: uuid (foreign key to projects.id, ON DELETE SET NULL, nullable)
- service_name: text (not null)
- cost: decimal (not null)
- billing_cycle: text ('weekly' | 'monthly' | 'quarterly' | 'annual', default 'monthly')
- start_date: date (nullable)
- next_billing_date: date (nullable) - derived from start_date and billing_cycle
- cancelled_date: date (nullable) - bounds pro-rated tax calculations
- category: text (default 'software')
- business_expense: boolean (default true)
- tax_deductible: boolean (default true)
- tax_rate: decimal (not null, default 30.0) - percentage
- status: text ('active' | 'cancelled' | 'paused', default 'active')
- notes: text (nullable)
- currency: text ('USD' | 'EUR' | 'GBP' | 'CAD', default 'USD')
- created_at: timestamp (default: now())
- updated_at: timestamp (trigger-maintained)

Reads join clients(name, color_hex) and projects(name).
"""
