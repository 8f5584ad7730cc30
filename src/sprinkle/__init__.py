from sprinkle.app import App as App
from sprinkle.app import Route as Route
from sprinkle.behaviors import Animate as Animate
from sprinkle.behaviors import AppendElement as AppendElement
from sprinkle.behaviors import Behavior as Behavior
from sprinkle.behaviors import Log as Log
from sprinkle.behaviors import On as On
from sprinkle.behaviors import SetStyle as SetStyle
from sprinkle.behaviors import ToggleStyle as ToggleStyle
from sprinkle.html import HTMLElement as HTMLElement
from sprinkle.html import Markup as Markup
from sprinkle.html import render as render
from sprinkle.javascript import JSCompilationError as JSCompilationError
from sprinkle.javascript import JsCallable as JsCallable
from sprinkle.javascript import JsFunction as JsFunction
from sprinkle.javascript import JsSource as JsSource
from sprinkle.javascript import javascript as javascript
from sprinkle.javascript import js_source as js_source
from sprinkle.script import AnonymousDefinition as AnonymousDefinition
from sprinkle.script import InjectionHazard as InjectionHazard
from sprinkle.script import InvalidCallable as InvalidCallable
from sprinkle.script import MarshalError as MarshalError
from sprinkle.script import Script as Script
from sprinkle.script import ScriptPayload as ScriptPayload
from sprinkle.script import build_payload as build_payload
from sprinkle.script import marshal as marshal

__version__ = "0.1.0"
