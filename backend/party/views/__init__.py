from party.views.party_handlers import create_party as create_party
from party.views.party_handlers import end_party as end_party
from party.views.party_handlers import join_party as join_party
from party.views.party_handlers import login as login
from party.views.party_handlers import party_snapshot as party_snapshot
from party.views.player_handlers import player_advance as player_advance
from party.views.player_handlers import player_control as player_control
from party.views.player_handlers import player_previous as player_previous
from party.views.player_handlers import player_reset as player_reset
from party.views.player_handlers import player_state as player_state
from party.views.submission_handlers import mark_track_played as mark_track_played
from party.views.submission_handlers import promote_track as promote_track
from party.views.submission_handlers import remove_track as remove_track
from party.views.submission_handlers import reset_track_priority as reset_track_priority
from party.views.submission_handlers import submit_track as submit_track
from party.views.submission_handlers import vote_track as vote_track
