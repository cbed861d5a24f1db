"""Keep a repository's .NET SDK pin in global.json up to date."""
