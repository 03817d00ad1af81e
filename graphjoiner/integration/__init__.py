""" Integrations with other libraries """
