import click
from flask.cli import with_appcontext
from healthrecords.extensions import db

@click.command('init-db')
@with_appcontext
def init_db_command():
    """Create all tables for users, health records and the per-user store."""
    db.create_all()
    click.echo("Database initialized successfully!")

@click.command('reset-chat')
@click.argument('user_id', type=int)
@with_appcontext
def reset_chat_command(user_id):
    """Clear one user's assistant chat history."""
    from flask import current_app
    current_app.extensions['chat_sessions'].get(user_id).clear()
    click.echo(f"Chat history cleared for user {user_id}")

def register_commands(app):
    app.cli.add_command(init_db_command)
    app.cli.add_command(reset_chat_command)
