"""
Tabledash Core - database access shared by all modules.

- supabase_client: public and credential-bound Supabase clients
- repository: generic table repository over a Supabase client
"""
