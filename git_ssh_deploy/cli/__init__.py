"""Command line interface for git-ssh-deploy"""
