"""Core cachectl components: paths, settings, wrapper descriptor and orchestration."""
