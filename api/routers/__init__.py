"""
API Routers - HTTP endpoint handlers

Each router handles a specific domain of functionality:
- llm: Route a prompt through the provider chain
- translation: Translate text through the translation provider chain
- reviews: Generate a taste-engine review decision
- health: Readiness and provider configuration
"""
