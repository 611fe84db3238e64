# Supabase table: lifetime_deals
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:
- id: uuid (primary key)
- user_id: uuid (foreign key to auth.users.id, not null)
- client_id: uuid (foreign key to clients.id, ON DELETE SET NULL, nullable)
- project_id: uuid (foreign key to projects.id, ON DELETE SET NULL, nullable)
- service_name: text (not null)
- original_cost: decimal (not null)
- purchase_date: date (not null)
- category: text (default 'software')
- business_expense: boolean (default true)
- tax_deductible: boolean (default true)
- tax_rate: decimal (default 30.0)
- resold_price: decimal (nullable)
- resold_date: date (nullable)
- profit_loss: decimal (generated: resold_price - original_cost)
- status: text ('active' | 'resold' | 'shutdown', default 'active')
- notes: text (nullable)
- currency: text (default 'USD')
- created_at: timestamp (default: now())
- updated_at: timestamp (trigger-maintained)
"""
